"""Command-line front end for the pikchr module: renders a Pikchr markup
file and writes the resulting SVG to standard output.

    pikchr diagram.pikchr > diagram.svg

Errors are always generated as plain text, and reported on standard
error as a single “ERROR: ” line, with an exit status of 1.
"""
#+
# Copyright 2026 the Python Pikchr authors.
# Licensed under the same 0BSD licence as Pikchr itself
# <https://pikchr.org/home/doc/trunk/homepage.md>.
#-

import sys
import argparse
import logging
import pikchr

logger = logging.getLogger(__name__)

class ArgumentParser(argparse.ArgumentParser) :
    "reports usage errors as a PikchrError, so they come out as an “ERROR: ”" \
    " line with exit status 1 like every other failure."

    def error(self, message) :
        raise pikchr.PikchrError(message)
    #end error

#end ArgumentParser

def build_parser() :
    parser = ArgumentParser \
      (
        prog = "pikchr",
        description = "render Pikchr markup to SVG."
      )
    parser.add_argument \
      (
        "filename",
        nargs = "*",
        help =
            "markup source file; if omitted, nothing is done unless --strict is given."
            " Only the first is rendered, any others are ignored."
      )
    parser.add_argument \
      (
        "--strict",
        action = "store_true",
        help = "treat a missing filename as an error"
      )
    parser.add_argument \
      (
        "--dark-mode",
        action = "store_true",
        help = "use colours suited to dark backgrounds"
      )
    parser.add_argument \
      (
        "--class",
        dest = "class_name",
        metavar = "NAME",
        help = "add class=\"NAME\" to the <svg> element"
      )
    parser.add_argument \
      (
        "-v", "--verbose",
        action = "store_true",
        help = "enable debug logging on standard error"
      )
    return \
        parser
#end build_parser

def render_file(filename, flags, class_name = None) :
    "reads the markup from the named file, replacing any invalid UTF-8, and" \
    " renders it, returning a RenderedImage."
    with open(filename, "rb") as infile :
        markup = infile.read()
    #end with
    logger.debug("read %d bytes from %r", len(markup), filename)
    return \
        pikchr.render(markup.decode("utf-8", errors = "replace"), class_name, flags)
#end render_file

def main(argv = None) :
    "runs the command line, returning the exit status."
    status = 0
    try :
        args = build_parser().parse_args(argv)
        # log to stderr, so diagnostics never get mixed in with the SVG
        logging.basicConfig \
          (
            level = (logging.WARNING, logging.DEBUG)[args.verbose],
            format = "%(levelname)s %(name)s %(message)s",
            stream = sys.stderr
          )
        if len(args.filename) != 0 :
            flags = pikchr.RenderFlags().generate_plain_errors()
            if args.dark_mode :
                flags.use_dark_mode()
            #end if
            with render_file(args.filename[0], flags, args.class_name) as image :
                # pass the bytes through untouched, whatever the stdout encoding
                sys.stdout.flush()
                sys.stdout.buffer.write(image.rendered_bytes)
                sys.stdout.buffer.flush()
            #end with
        elif args.strict :
            raise pikchr.PikchrError("no input file given")
        #end if
    except (OSError, pikchr.PikchrError, NotImplementedError) as fail :
        sys.stderr.write("ERROR: %s\n" % fail)
        status = 1
    #end try
    return \
        status
#end main

if __name__ == "__main__" :
    sys.exit(main())
#end if
