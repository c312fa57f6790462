"""A Python 3 wrapper for Pikchr <https://pikchr.org/> using ctypes.
Pikchr is a PIC-like markup language for diagrams; this module hands
markup source to the pikchr() routine in the C library and gives back
the SVG it produces. If you are embedding into HTML then you can have
any errors generated as HTML, otherwise errors come out as plain text.

The main interface is the render() function, which returns a
RenderedImage:

    import pikchr
    image = pikchr.render('arrow right 200% "Markdown" "Source"')
    print(image)

A RenderedImage owns the buffer that pikchr allocated, and frees it
exactly once: on close(), on leaving a “with” block, or when the object
is garbage-collected, whichever comes first. Failures reported by pikchr
are raised as RenderError, carrying the error text pikchr generated.

The location of the shared library can be overridden by setting the
PIKCHR_LIBRARY environment variable to its path.
"""
#+
# Copyright 2026 the Python Pikchr authors.
# Licensed under the same 0BSD licence as Pikchr itself
# <https://pikchr.org/home/doc/trunk/homepage.md>.
#-

import os
import re
import logging
import ctypes as ct
import ctypes.util

logger = logging.getLogger(__name__)

def _load_pikchr() :
    # tries each candidate location for the pikchr library in turn, returning
    # None if none of them can be loaded.
    candidates = []
    env_path = os.environ.get("PIKCHR_LIBRARY")
    if env_path :
        candidates.append(env_path)
    #end if
    found = ct.util.find_library("pikchr")
    if found != None :
        candidates.append(found)
    #end if
    candidates.append("libpikchr.so")
    result = None
    for name in candidates :
        try :
            result = ct.cdll.LoadLibrary(name)
        except OSError as fail :
            if name == env_path :
                logger.warning("cannot load PIKCHR_LIBRARY %r: %s", name, fail)
            else :
                logger.debug("cannot load pikchr library %r: %s", name, fail)
            #end if
            continue
        #end try
        logger.debug("loaded pikchr library %r", name)
        break
    #end for
    return \
        result
#end _load_pikchr

pk = _load_pikchr()
libc = ct.cdll.LoadLibrary("libc.so.6")

class PIKCHR :
    "useful definitions adapted from pikchr.h."

    # bits for the mFlags argument to pikchr()
    PLAINTEXT_ERRORS = 0x0001
      # error message text comes out as text/plain instead of text/html
    DARK_MODE = 0x0002
      # alter colour choices to suit dark backgrounds, e.g. dark-mode web pages

#end PIKCHR

#+
# Routine arg/result types
#-

if pk != None :
    # result is declared c_void_p, not c_char_p, so that the raw address
    # survives to be passed back to free().
    pk.pikchr.restype = ct.c_void_p
    pk.pikchr.argtypes = \
        (
            ct.c_char_p, # zText: input source text, NUL-terminated
            ct.c_char_p, # zClass: add class="%s" to <svg> markup, may be NULL
            ct.c_uint, # mFlags
            ct.POINTER(ct.c_int), # pnWidth: OUT, negative on error
            ct.POINTER(ct.c_int), # pnHeight: OUT
        )
#end if
libc.free.argtypes = (ct.c_void_p,)
libc.free.restype = None

def is_available() :
    "returns True iff the pikchr library was successfully loaded."
    return \
        pk != None
#end is_available

def _ensure_pk() :
    # ensures pikchr is usable, raising a suitable exception if not.
    if pk == None :
        raise NotImplementedError("pikchr library not available")
    #end if
#end _ensure_pk

def _free(buf, free = libc.free) :
    # pikchr allocates its result with malloc(); this is the only valid way to
    # dispose of it. free is bound at definition so it outlives module teardown.
    free(buf)
#end _free

#+
# Exceptions
#-

class PikchrError(Exception) :
    "base class for errors raised by this module."
    pass
#end PikchrError

class EncodingError(PikchrError, ValueError) :
    "an argument could not be turned into a NUL-terminated C string."

    def __init__(self, argname, reason) :
        self.args = ("cannot pass %s to pikchr: %s" % (argname, reason),)
        self.argname = argname
        self.reason = reason
    #end __init__

#end EncodingError

class RenderError(PikchrError) :
    "pikchr reported a failure. Since pikchr does not have a structured error" \
    " format, the message attribute is simply the error text it generated."

    def __init__(self, message) :
        self.args = (message,)
        self.message = message
    #end __init__

#end RenderError

def _to_c_string(value, argname) :
    "converts a str or bytes argument to bytes suitable for passing as a" \
    " NUL-terminated C string."
    if isinstance(value, str) :
        try :
            value = value.encode("utf-8")
        except UnicodeEncodeError as fail :
            raise EncodingError(argname, "not encodable as UTF-8 (%s)" % fail.reason)
        #end try
    elif isinstance(value, (bytes, bytearray)) :
        value = bytes(value)
    else :
        raise TypeError("%s must be str or bytes" % argname)
    #end if
    nul_pos = value.find(b"\x00")
    if nul_pos >= 0 :
        raise EncodingError(argname, "embedded NUL byte at offset %d" % nul_pos)
    #end if
    return \
        value
#end _to_c_string

#+
# Flags
#-

class RenderFlags :
    "flags for converting pikchr source. The defaults generate plain-text errors" \
    " and light-mode diagrams. Use the setter methods to change them; each returns" \
    " the same RenderFlags object, so calls can be chained."

    __slots__ = ("_plain_errors", "_dark_mode") # to forestall typos

    def __init__(self, plain_errors = True, dark_mode = False) :
        self._plain_errors = bool(plain_errors)
        self._dark_mode = bool(dark_mode)
    #end __init__

    @property
    def plain_errors(self) :
        "whether errors will be generated as plain text rather than HTML."
        return \
            self._plain_errors
    #end plain_errors

    def generate_plain_errors(self) :
        "requests that errors be generated as plain text."
        self._plain_errors = True
        return \
            self
    #end generate_plain_errors

    def generate_html_errors(self) :
        "requests that errors be generated as HTML."
        self._plain_errors = False
        return \
            self
    #end generate_html_errors

    @property
    def dark_mode(self) :
        "whether diagrams will use colours suited to dark backgrounds."
        return \
            self._dark_mode
    #end dark_mode

    def use_dark_mode(self) :
        self._dark_mode = True
        return \
            self
    #end use_dark_mode

    def clear_dark_mode(self) :
        self._dark_mode = False
        return \
            self
    #end clear_dark_mode

    def encode(self) :
        "returns the mFlags bitmask for passing to pikchr()."
        result = 0
        if self._plain_errors :
            result |= PIKCHR.PLAINTEXT_ERRORS
        #end if
        if self._dark_mode :
            result |= PIKCHR.DARK_MODE
        #end if
        return \
            result
    #end encode

    def __int__(self) :
        return \
            self.encode()
    #end __int__

    def copy(self) :
        return \
            RenderFlags(self._plain_errors, self._dark_mode)
    #end copy

    def __eq__(f1, f2) :
        if isinstance(f2, RenderFlags) :
            result = f1.encode() == f2.encode()
        else :
            result = NotImplemented
        #end if
        return \
            result
    #end __eq__

    __hash__ = None # mutable, so not hashable

    def __repr__(self) :
        return \
            (
                "RenderFlags(plain_errors = %s, dark_mode = %s)"
            %
                (self._plain_errors, self._dark_mode)
            )
    #end __repr__

#end RenderFlags

#+
# The foreign call
#-

def _invoke(source, class_name, mask) :
    "performs the one call to pikchr(), returning the raw triple (buffer address," \
    " width, height) exactly as it came back. The caller becomes responsible for" \
    " freeing the buffer."
    # ctypes gotcha: the encoded strings must stay referenced from local variables
    # until the call returns, since pikchr only borrows them.
    c_source = _to_c_string(source, "source")
    if class_name != None :
        c_class = _to_c_string(class_name, "class_name")
    else :
        c_class = None
    #end if
    _ensure_pk()
    width = ct.c_int(0)
    height = ct.c_int(0)
    buf = pk.pikchr(c_source, c_class, mask, ct.byref(width), ct.byref(height))
    return \
        (buf, width.value, height.value)
#end _invoke

def _interpret(buf, width, height) :
    "classifies the result of a pikchr() call. A negative width means buf holds" \
    " error text, which is copied out, freed and raised as a RenderError; otherwise" \
    " ownership of buf passes to a new RenderedImage, which is returned."
    if width < 0 :
        if buf != None :
            try :
                message = ct.string_at(buf).decode("utf-8", errors = "replace")
            finally :
                _free(buf)
            #end try
        else :
            message = "pikchr failed without an error message"
        #end if
        logger.debug("pikchr error: %r", message)
        raise RenderError(message)
    #end if
    if buf == None :
        # contract violation by pikchr; nothing to own, so report it rather than
        # constructing an image around a null pointer.
        raise RenderError("pikchr returned no output")
    #end if
    logger.debug("pikchr rendered %d x %d", width, height)
    return \
        RenderedImage._wrap(buf, width, height)
#end _interpret

def render(source, class_name = None, flags = None) :
    "renders pikchr source (str or bytes) as SVG, returning a RenderedImage." \
    " class_name, if given, is added as a class attribute on the <svg> element." \
    " flags defaults to RenderFlags(). Raises RenderError if pikchr reports a" \
    " failure, EncodingError if source or class_name contains a NUL byte."
    if flags == None :
        flags = RenderFlags()
    elif not isinstance(flags, RenderFlags) :
        raise TypeError("expecting RenderFlags")
    #end if
    buf, width, height = _invoke(source, class_name, flags.encode())
    return \
        _interpret(buf, width, height)
#end render

#+
# The rendered result
#-

_view_box_pattern = re.compile(r"""viewBox=["']([^"']*)["']""")

class RenderedImage :
    "a rendered pikchr diagram. Do not instantiate directly; call render()." \
    "\n\n" \
    "The SVG text is available as the rendered property or via str(); the width" \
    " and height are plain integers as reported by pikchr. The object exclusively" \
    " owns the underlying pikchr buffer: it cannot be copied or pickled, only" \
    " transferred with move()."

    __slots__ = ("_buf", "_width", "_height", "_text", "__weakref__") # to forestall typos

    def __new__(celf, *args, **kwargs) :
        raise TypeError("use pikchr.render() to create a RenderedImage")
    #end __new__

    @classmethod
    def _wrap(celf, buf, width, height) :
        # takes ownership of buf.
        self = object.__new__(celf)
        self._buf = buf
        self._width = width
        self._height = height
        self._text = None
        return \
            self
    #end _wrap

    @staticmethod
    def render(source, class_name = None, flags = None) :
        "same as the module-level render() function."
        return \
            render(source, class_name, flags)
    #end render

    def close(self) :
        "frees the pikchr buffer. Calling this again does nothing."
        if self._buf != None :
            buf = self._buf
            self._buf = None
            self._text = None
            _free(buf)
        #end if
    #end close

    def __del__(self) :
        if _free != None :
            self.close()
        #end if
    #end __del__

    def __enter__(self) :
        return \
            self
    #end __enter__

    def __exit__(self, exception_type, exception_value, traceback) :
        self.close()
    #end __exit__

    @property
    def closed(self) :
        "whether the buffer has been freed (or moved to another RenderedImage)."
        return \
            self._buf == None
    #end closed

    def move(self) :
        "transfers ownership of the buffer to a new RenderedImage, which is returned." \
        " This object is left closed."
        self._check_open()
        result = RenderedImage._wrap(self._buf, self._width, self._height)
        result._text = self._text
        self._buf = None
        self._text = None
        return \
            result
    #end move

    def _check_open(self) :
        if self._buf == None :
            raise ValueError("RenderedImage has been released")
        #end if
    #end _check_open

    @property
    def width(self) :
        "the width of the diagram."
        return \
            self._width
    #end width

    @property
    def height(self) :
        "the height of the diagram."
        return \
            self._height
    #end height

    @property
    def rendered_bytes(self) :
        "the SVG text as bytes, as generated by pikchr."
        self._check_open()
        return \
            ct.string_at(self._buf)
    #end rendered_bytes

    @property
    def rendered(self) :
        "the SVG text."
        self._check_open()
        if self._text == None :
            # pikchr only ever emits UTF-8 on success
            self._text = self.rendered_bytes.decode("utf-8")
        #end if
        return \
            self._text
    #end rendered

    @property
    def view_box(self) :
        "the viewBox of the <svg> element as a tuple of 4 floats (min-x, min-y, width," \
        " height), or None if there is none, as for an empty diagram."
        match = _view_box_pattern.search(self.rendered)
        result = None
        if match != None :
            try :
                result = tuple(float(v) for v in match.group(1).replace(",", " ").split())
            except ValueError :
                result = None
            #end try
            if result != None and len(result) != 4 :
                result = None
            #end if
        #end if
        return \
            result
    #end view_box

    def __str__(self) :
        return \
            self.rendered
    #end __str__

    def __contains__(self, item) :
        return \
            item in self.rendered
    #end __contains__

    def __repr__(self) :
        if self._buf != None :
            result = "<RenderedImage %d x %d>" % (self._width, self._height)
        else :
            result = "<RenderedImage (released)>"
        #end if
        return \
            result
    #end __repr__

    def __copy__(self) :
        raise TypeError("RenderedImage owns its buffer and cannot be copied; use move()")
    #end __copy__

    def __deepcopy__(self, memo) :
        raise TypeError("RenderedImage owns its buffer and cannot be copied; use move()")
    #end __deepcopy__

    def __reduce__(self) :
        raise TypeError("RenderedImage cannot be pickled")
    #end __reduce__

#end RenderedImage
