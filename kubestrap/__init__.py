# pylint: disable=missing-docstring
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version('kubestrap')
except PackageNotFoundError:
    __version__ = '0.1.0'

# Defining some constants
STARTUP_LOG = "/var/log/startup.log"
ROLES = ("node", "master")
