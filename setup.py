#+
# Setuptools script to install python_pikchr. Make sure setuptools
# <https://setuptools.pypa.io/en/latest/index.html> is installed.
# Invoke from the command line in this directory as follows:
#
#     python3 setup.py build
#     sudo python3 setup.py install
#
# The pikchr shared library itself must be installed separately; set
# PIKCHR_LIBRARY to its path if it is not on the default search path.
#-

import setuptools

setuptools.setup \
  (
    name = "python_pikchr",
    version = "0.1",
    description = "language bindings for Pikchr",
    long_description = "language bindings for the Pikchr diagram renderer, for Python 3.2 or later",
    license = "0BSD",
    py_modules = ["pikchr", "pikchr_cli"],
    entry_points =
        {
            "console_scripts" : ["pikchr = pikchr_cli:main"],
        },
  )
