from kubestrap.cluster import Endpoint, NetworkRanges
from kubestrap.util.net import endpoint, subnet_of, is_ip, is_port


def test_endpoint():
    assert endpoint(Endpoint(host="10.0.0.1", port=443)) == "10.0.0.1:443"
    assert endpoint(Endpoint(host="api.example.com", port=6443)) == \
        "api.example.com:6443"


def test_endpoint_is_not_validated():
    assert endpoint(Endpoint(host="", port=443)) == ":443"
    assert endpoint(Endpoint(host="10.0.0.1", port="https")) == \
        "10.0.0.1:https"


def test_subnet_of():
    assert subnet_of(NetworkRanges(("10.96.0.0/12",))) == "10.96.0.0/12"
    assert subnet_of(NetworkRanges(["192.168.0.0/16", "10.0.0.0/8"])) == \
        "192.168.0.0/16"


def test_subnet_of_is_canonical():
    assert subnet_of(NetworkRanges(("10.96.0.1/12",))) == "10.96.0.0/12"
    assert subnet_of(NetworkRanges(("fd00::1/64",))) == "fd00::/64"


def test_subnet_of_empty():
    assert subnet_of(NetworkRanges(())) == ""


def test_subnet_of_garbage():
    assert subnet_of(NetworkRanges(("not-a-network",))) == "not-a-network"


def test_is_ip():
    assert is_ip("10.0.0.1")
    assert is_ip("fd00::1")
    assert not is_ip("api.example.com")


def test_is_port():
    assert is_port(443)
    assert not is_port(70000)
    assert not is_port("443")
