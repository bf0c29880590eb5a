"""
tests for kubestrap.provision.startup
"""
#  pylint: disable=redefined-outer-name
import pytest

from kubestrap.provision.startup import StartupScripts, script_name
from kubestrap.provision.template import (MissingField, SignatureMismatch,
                                          TemplateError)
from kubestrap.util.net import endpoint

from .testdata import (PARAMS, PRELOADED_PARAMS, SHEBANG, END_LINE,
                       INSTALL_MARKER, CONFIGURE_MARKER, TOKEN)


@pytest.fixture(scope="module")
def scripts():
    return StartupScripts()


def assert_wrapped(script):
    assert script.startswith(SHEBANG + "\n")
    assert script.count(SHEBANG) == 1
    assert script.count("set -e\nset -x\n") == 1
    assert script.endswith(END_LINE + "\n")
    assert script.count(END_LINE) == 1


def test_script_name():
    assert script_name(PARAMS) == "fullScript"
    assert script_name(PRELOADED_PARAMS) == "preloadedScript"


@pytest.mark.parametrize("role", ["node", "master"])
def test_full_script(scripts, role):
    script = getattr(scripts, "%s_script" % role)(PARAMS)

    assert_wrapped(script)
    assert script.count(INSTALL_MARKER) == 1
    assert script.count(CONFIGURE_MARKER) == 1
    assert script.index(SHEBANG) < script.index(INSTALL_MARKER) \
        < script.index(CONFIGURE_MARKER) < script.index(END_LINE)


@pytest.mark.parametrize("role", ["node", "master"])
def test_preloaded_script(scripts, role):
    script = getattr(scripts, "%s_script" % role)(PRELOADED_PARAMS)

    assert_wrapped(script)
    assert INSTALL_MARKER not in script
    assert "apt-key add" not in script
    assert script.count(CONFIGURE_MARKER) == 1


def test_node_script_values(scripts):
    script = scripts.node_script(PARAMS)

    assert "KUBELET_VERSION=1.9.0\n" in script
    assert "TOKEN=%s\n" % TOKEN in script
    assert "MASTER=10.0.0.1:443\n" in script
    assert "MACHINE=test-node-1\n" in script
    assert "CLUSTER_DNS_DOMAIN=cluster.local\n" in script
    assert "SERVICE_CIDR=10.96.0.0/12\n" in script
    assert "{{" not in script


def test_master_script_values(scripts):
    script = scripts.master_script(PARAMS)

    assert "CONTROL_PLANE_VERSION=1.9.0\n" in script
    assert "POD_CIDR=192.168.0.0/16\n" in script
    assert "SERVICE_CIDR=10.96.0.0/12\n" in script
    assert "kubeadm init --config" in script
    assert "kubeadm join" not in script
    # the image list is only used for preloading
    assert "docker pull" not in script


def test_rendering_is_idempotent(scripts):
    assert scripts.node_script(PARAMS) == scripts.node_script(PARAMS)
    assert scripts.master_script(PRELOADED_PARAMS) == \
        scripts.master_script(PRELOADED_PARAMS)
    assert scripts.preload_node_script("1.9.0", ["a"]) == \
        scripts.preload_node_script("1.9.0", ["a"])


def test_preload_node_script(scripts):
    script = scripts.preload_node_script("1.9.0", ["imgA", "imgB"])

    assert_wrapped(script)
    pulls = [line for line in script.splitlines()
             if line.startswith("docker pull")]
    assert pulls == ["docker pull imgA", "docker pull imgB"]
    assert script.count(INSTALL_MARKER) == 1
    assert CONFIGURE_MARKER not in script
    assert script.index("systemctl start docker") < \
        script.index("docker pull imgA")


def test_preload_keeps_duplicates(scripts):
    script = scripts.preload_node_script("1.9.0", ["imgA", "imgB", "imgA"])
    assert script.count("docker pull imgA\n") == 2


def test_preload_single_image_string(scripts):
    script = scripts.preload_node_script("1.9.0", "k8s.gcr.io/pause:3.1")

    pulls = [line for line in script.splitlines()
             if line.startswith("docker pull")]
    assert pulls == ["docker pull k8s.gcr.io/pause:3.1"]


def test_preload_without_images(scripts):
    script = scripts.preload_node_script("1.9.0", [])

    assert_wrapped(script)
    assert "docker pull" not in script


def test_preload_master_script(scripts):
    script = scripts.preload_master_script("1.10.2", ["imgA"])

    assert_wrapped(script)
    assert "KUBELET_VERSION=1.10.2\n" in script
    assert "docker pull imgA\n" in script
    assert "kubeadm init" not in script


@pytest.mark.parametrize("role", ["node", "master"])
def test_missing_cluster(scripts, role):
    params = PARAMS._replace(cluster=None)

    with pytest.raises(MissingField) as err:
        getattr(scripts, "%s_script" % role)(params)

    assert err.value.path.startswith("cluster.")


def test_missing_machine(scripts):
    with pytest.raises(TemplateError):
        scripts.node_script(PRELOADED_PARAMS._replace(machine=None))


def test_missing_endpoint(scripts):
    cluster = PARAMS.cluster._replace(api_endpoints=())

    with pytest.raises(MissingField) as err:
        scripts.node_script(PARAMS._replace(cluster=cluster))

    assert err.value.path == "cluster.api_endpoints.0"


def test_signature_is_checked_on_startup():
    def endpoint_without_annotations(api_endpoint):
        return endpoint(api_endpoint)

    with pytest.raises(SignatureMismatch):
        StartupScripts(functions={"endpoint": endpoint_without_annotations})

    # a signature mismatch is not a rendering error
    assert not issubclass(SignatureMismatch, TemplateError)
