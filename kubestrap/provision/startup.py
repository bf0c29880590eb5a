"""
startup.py
==========

Render the startup scripts of masters and worker nodes.

Create one :class:`StartupScripts` when the program starts and pass it
to everything that needs a script::

    scripts = StartupScripts()
    userdata = scripts.node_script(params)
"""
from kubestrap.cluster import (TemplateParams, MachineDescriptor,
                               MachineVersions)
from kubestrap.util.logger import Logger
from kubestrap.util.net import endpoint, subnet_of
from .fragments import GENERIC_FRAGMENTS, NODE_FRAGMENTS, MASTER_FRAGMENTS
from .template import FragmentSet

LOGGER = Logger(__name__)

RENDER_FUNCTIONS = {
    "endpoint": endpoint,
    "subnet_of": subnet_of,
}


def script_name(params):
    """
    Choose the top level fragment for ``params``.

    Machines booted from an image which already has all packages skip the
    installation.
    """
    if params.preloaded:
        return "preloadedScript"
    return "fullScript"


class StartupScripts:
    """
    The fragment sets of all roles.

    Building the sets checks the fragments and the render functions, errors
    raised here mean the program itself is broken.

    Args:
        functions (dict): override the render functions, mainly for testing

    Raises:
        TemplateSyntaxError, CyclicFragments, SignatureMismatch
    """

    def __init__(self, functions=None):
        functions = RENDER_FUNCTIONS if functions is None else functions
        self.node = FragmentSet("node", GENERIC_FRAGMENTS, NODE_FRAGMENTS,
                                functions=functions)
        self.master = FragmentSet("master", GENERIC_FRAGMENTS,
                                  MASTER_FRAGMENTS, functions=functions)

    def node_script(self, params):
        """
        The bootstrap script which joins a worker node to the cluster.

        Raises:
            MissingField, UndefinedFragment
        """
        return self.node.render(script_name(params), params)

    def master_script(self, params):
        """
        The bootstrap script which creates the control plane.

        Raises:
            MissingField, UndefinedFragment
        """
        return self.master.render(script_name(params), params)

    def preload_node_script(self, kubelet_version, images):
        """
        A script which installs the node packages and pulls ``images``.

        Run it while building a machine image, machines booted from that
        image use the preloaded script.
        """
        return _preload(self.node, kubelet_version, images)

    def preload_master_script(self, kubelet_version, images):
        """
        A script which installs the master packages and pulls ``images``.
        """
        return _preload(self.master, kubelet_version, images)


def _preload(fragments, kubelet_version, images):
    machine = MachineDescriptor(name="",
                                versions=MachineVersions(
                                    kubelet=kubelet_version,
                                    control_plane=""))
    params = TemplateParams(machine=machine, images=images)
    LOGGER.debug("Preloading %d images for %s", len(params.images),
                 fragments.name)
    return fragments.render("generatePreloadedImage", params)
