"""
kubestrap
=========

The command line interface for rendering startup scripts.
Don't use it directly, instead install the package with setup.py.
It automatically creates an executable in your path.

"""
import argparse
import sys

import yaml
from mach import mach1

from . import __version__, ROLES
from .config import load_config
from .provision.startup import StartupScripts
from .provision.template import TemplateError
from .util.logger import Logger, parse_level

LOGGER = Logger(__name__)


def split_images(images):
    """Split a comma separated list of images, dropping empty entries"""
    return [image.strip() for image in images.split(",") if image.strip()]


def write_script(script, output=None):
    """Write ``script`` to the file ``output`` or to STDOUT"""
    if not output:
        sys.stdout.write(script)
        return

    with open(output, "w") as fh:
        fh.write(script)
    LOGGER.success("Startup script written to %s", output)


@mach1()
class Kubestrap:  # pylint: disable=no-self-use
    """
    The main entry point for the program. This class does the CLI parsing
    and descides which action shoud be taken
    """
    def __init__(self):
        self.parser.add_argument(  # pylint: disable=no-member
            "--version", action="store_true",
            help="show version and exit",
            default=argparse.SUPPRESS)

        verbosity_help = "".join([
            "set the verbosity level (",
            "0 = quiet, ",
            "1 = error, ",
            "2 = warning, ",
            "3 = info, ",
            "4 = debug)"])
        self.parser.add_argument("--verbosity",  # pylint: disable=no-member
                                 "-v",
                                 help=verbosity_help,
                                 choices=['0', '1', '2', '3', '4', 'quiet',
                                          'error', 'warning', 'info', 'debug'],
                                 type=str,
                                 default='3')
        self.scripts = StartupScripts()

    # mach calls _get_<option>(value) for every global option that is set
    def _get_version(self, _show=True):
        print("%s version: %s" % (self.__class__.__name__, __version__))
        sys.exit(0)

    def _get_verbosity(self, level):
        Logger.LOG_LEVEL = parse_level(level)
        LOGGER.level = level

    def _render(self, role, config, output):
        try:
            params = load_config(config)
            script = getattr(self.scripts, "%s_script" % role)(params)
        except (OSError, yaml.YAMLError, ValueError, TemplateError) as err:
            LOGGER.error(f"Error: {err}")
            sys.exit(1)
        write_script(script, output)

    def node(self, config: str, output: str = None):
        """
        Render the startup script of a worker node

        config - configuration file
        output - write the script to this file instead of STDOUT
        """
        self._render("node", config, output)

    def master(self, config: str, output: str = None):
        """
        Render the startup script of a master

        config - configuration file
        output - write the script to this file instead of STDOUT
        """
        self._render("master", config, output)

    def preload(self, role: str, kubelet_version: str, images: str = "",
                output: str = None):
        """
        Render a script which prepares a machine image for a role

        role - one of node or master
        kubelet_version - the kubelet version to install, e.g. 1.9.0
        images - comma separated list of docker images to pull
        output - write the script to this file instead of STDOUT
        """
        if role not in ROLES:
            LOGGER.error('Error: role must be '
                         '[%s]' % " | ".join(ROLES))
            sys.exit(1)

        render = getattr(self.scripts, "preload_%s_script" % role)
        try:
            script = render(kubelet_version, split_images(images))
        except TemplateError as err:
            LOGGER.error(f"Error: {err}")
            sys.exit(1)
        write_script(script, output)


def main():
    """
    run and execute kubestrap
    """
    k = Kubestrap()

    # the mach decorator analyzes the methods in the class and dynamically
    # creates the CLI parser. It also adds the method run to the class.
    # Global options are applied through the _get_* methods before the
    # command runs.
    k.run()  # pylint: disable=no-member


if __name__ == "__main__":
    main()
