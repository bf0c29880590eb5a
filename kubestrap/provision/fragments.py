"""
fragments.py
============

The building blocks of the startup scripts.

``GENERIC_FRAGMENTS`` are shared by all roles and define the top level
scripts. ``NODE_FRAGMENTS`` and ``MASTER_FRAGMENTS`` provide ``install``
and ``configure`` for worker nodes and for masters.

See :mod:`kubestrap.provision.template` for the tag syntax.
"""
from kubestrap import STARTUP_LOG

START_SCRIPT = """\
#!/bin/bash

set -e
set -x

("""

END_SCRIPT = """\
echo done.
) 2>&1 | tee {log}
""".format(log=STARTUP_LOG)

FULL_SCRIPT = """\
{{ include startScript }}
{{ include install }}
{{ include configure }}
{{ include endScript }}"""

PRELOADED_SCRIPT = """\
{{ include startScript }}
{{ include configure }}
{{ include endScript }}"""

GENERATE_PRELOADED_IMAGE = """\
{{ include startScript }}
{{ include install }}

systemctl enable docker || true
systemctl start docker || true

{{ each images }}
docker pull {{ item }}
{{ end }}
{{ include endScript }}"""

GENERIC_FRAGMENTS = {
    "startScript": START_SCRIPT,
    "endScript": END_SCRIPT,
    "fullScript": FULL_SCRIPT,
    "preloadedScript": PRELOADED_SCRIPT,
    "generatePreloadedImage": GENERATE_PRELOADED_IMAGE,
}

# Debian packages have versions like "1.8.0-00" or "1.8.0-01". Do a prefix
# search based on the SemVer to find the newest matching package version.
GETVERSION = r"""
function getversion() {
    name=$1
    prefix=$2
    version=$(apt-cache madison $name | awk '{ print $3 }' | grep ^$prefix | head -n1)
    if [[ -z "$version" ]]; then
        echo Can\'t find package $name with prefix $prefix
        exit 1
    fi
    echo $version
}
"""

NODE_INSTALL = """\
# Disable swap otherwise kubelet won't run
swapoff -a
sed -i '/ swap / s/^/#/' /etc/fstab

apt-get update
apt-get install -y apt-transport-https prips
apt-key adv --keyserver hkp://keyserver.ubuntu.com --recv-keys F76221572C52609D

cat <<EOF > /etc/apt/sources.list.d/k8s.list
deb [arch=amd64] https://apt.dockerproject.org/repo ubuntu-xenial main
EOF

apt-get update
apt-get install -y docker.io

curl -s https://packages.cloud.google.com/apt/doc/apt-key.gpg | apt-key add -

cat <<EOF > /etc/apt/sources.list.d/kubernetes.list
deb http://apt.kubernetes.io/ kubernetes-xenial main
EOF
apt-get update
"""

NODE_CONFIGURE = """\
KUBELET_VERSION={{ machine.versions.kubelet }}
TOKEN={{ token }}
MASTER={{ endpoint cluster.api_endpoints.0 }}
MACHINE={{ machine.name }}
CLUSTER_DNS_DOMAIN={{ cluster.network.service_domain }}
SERVICE_CIDR={{ subnet_of cluster.network.services }}
""" + GETVERSION + """
KUBELET=$(getversion kubelet ${KUBELET_VERSION}-)
KUBEADM=$(getversion kubeadm ${KUBELET_VERSION}-)
KUBECTL=$(getversion kubectl ${KUBELET_VERSION}-)
apt-get install -y kubelet=${KUBELET} kubeadm=${KUBEADM} kubectl=${KUBECTL}

systemctl enable docker || true
systemctl start docker || true

sysctl net.bridge.bridge-nf-call-iptables=1

# kubeadm uses 10th IP as DNS server
CLUSTER_DNS_SERVER=$(prips ${SERVICE_CIDR} | head -n 11 | tail -n 1)

cat > /etc/systemd/system/kubelet.service.d/20-cloud.conf << EOF
[Service]
Environment="KUBELET_DNS_ARGS=--cluster-dns=${CLUSTER_DNS_SERVER} --cluster-domain=${CLUSTER_DNS_DOMAIN}"
Environment="KUBELET_EXTRA_ARGS=--cloud-provider=vsphere"
EOF
systemctl daemon-reload
systemctl restart kubelet.service

kubeadm join --token "${TOKEN}" "${MASTER}" --skip-preflight-checks --discovery-token-unsafe-skip-ca-verification

for tries in $(seq 1 60); do
    kubectl --kubeconfig /etc/kubernetes/kubelet.conf annotate --overwrite node $(hostname) machine=${MACHINE} && break
    sleep 1
done
"""

NODE_FRAGMENTS = {
    "install": NODE_INSTALL,
    "configure": NODE_CONFIGURE,
}

MASTER_INSTALL = """\
# Disable swap otherwise kubelet won't run
swapoff -a
sed -i '/ swap / s/^/#/' /etc/fstab

KUBELET_VERSION={{ machine.versions.kubelet }}

curl -s https://packages.cloud.google.com/apt/doc/apt-key.gpg | apt-key add -
touch /etc/apt/sources.list.d/kubernetes.list
sh -c 'echo "deb http://apt.kubernetes.io/ kubernetes-xenial main" > /etc/apt/sources.list.d/kubernetes.list'

apt-get update -y

apt-get install -y \\
    socat \\
    ebtables \\
    docker.io \\
    apt-transport-https \\
    cloud-utils \\
    prips

export VERSION=v${KUBELET_VERSION}
export ARCH=amd64
curl -sSL https://dl.k8s.io/release/${VERSION}/bin/linux/${ARCH}/kubeadm > /usr/bin/kubeadm.dl
chmod a+rx /usr/bin/kubeadm.dl
"""

MASTER_CONFIGURE = """\
KUBELET_VERSION={{ machine.versions.kubelet }}
TOKEN={{ token }}
PORT=443
MACHINE={{ machine.name }}
CONTROL_PLANE_VERSION={{ machine.versions.control_plane }}
CLUSTER_DNS_DOMAIN={{ cluster.network.service_domain }}
POD_CIDR={{ subnet_of cluster.network.pods }}
SERVICE_CIDR={{ subnet_of cluster.network.services }}

# kubeadm uses 10th IP as DNS server
CLUSTER_DNS_SERVER=$(prips ${SERVICE_CIDR} | head -n 11 | tail -n 1)
""" + GETVERSION + """
KUBELET=$(getversion kubelet ${KUBELET_VERSION}-)
KUBEADM=$(getversion kubeadm ${KUBELET_VERSION}-)

apt-get install -y \\
    kubelet=${KUBELET} \\
    kubeadm=${KUBEADM}

mv /usr/bin/kubeadm.dl /usr/bin/kubeadm
chmod a+rx /usr/bin/kubeadm

systemctl enable docker
systemctl start docker
cat > /etc/systemd/system/kubelet.service.d/20-cloud.conf << EOF
[Service]
Environment="KUBELET_DNS_ARGS=--cluster-dns=${CLUSTER_DNS_SERVER} --cluster-domain=${CLUSTER_DNS_DOMAIN}"
Environment="KUBELET_EXTRA_ARGS=--cloud-provider=vsphere --cloud-config=/etc/kubernetes/cloud-config/cloud-config.yaml"
EOF
systemctl daemon-reload
systemctl restart kubelet.service

PRIVATEIP=`ip route get 8.8.8.8 | awk '{printf "%s", $NF; exit}'`
echo $PRIVATEIP > /tmp/.ip
PUBLICIP=`ip route get 8.8.8.8 | awk '{printf "%s", $NF; exit}'`

# Set up kubeadm config file to pass parameters to kubeadm init.
cat > /etc/kubernetes/kubeadm_config.yaml <<EOF
apiVersion: kubeadm.k8s.io/v1alpha1
kind: MasterConfiguration
api:
  advertiseAddress: ${PUBLICIP}
  bindPort: ${PORT}
networking:
  serviceSubnet: ${SERVICE_CIDR}
kubernetesVersion: v${CONTROL_PLANE_VERSION}
token: ${TOKEN}
apiServerCertSANs:
- ${PUBLICIP}
- ${PRIVATEIP}
apiServerExtraArgs:
  cloud-provider: vsphere
  cloud-config: /etc/kubernetes/cloud-config/cloud-config.yaml
apiServerExtraVolumes:
  - name: cloud-config
    hostPath: /etc/kubernetes/cloud-config
    mountPath: /etc/kubernetes/cloud-config
controllerManagerExtraArgs:
  cloud-provider: vsphere
  cloud-config: /etc/kubernetes/cloud-config/cloud-config.yaml
  address: 0.0.0.0
schedulerExtraArgs:
  address: 0.0.0.0
controllerManagerExtraVolumes:
  - name: cloud-config
    hostPath: /etc/kubernetes/cloud-config
    mountPath: /etc/kubernetes/cloud-config
EOF

kubeadm init --config /etc/kubernetes/kubeadm_config.yaml

# install weavenet
sysctl net.bridge.bridge-nf-call-iptables=1
export kubever=$(kubectl version --kubeconfig /etc/kubernetes/admin.conf | base64 | tr -d '\\n')
kubectl apply --kubeconfig /etc/kubernetes/admin.conf -f "https://cloud.weave.works/k8s/net?env.CHECKPOINT_DISABLE=1&env.IPALLOC_RANGE=${POD_CIDR}&disable-npc=true&k8s-version=$kubever"

for tries in $(seq 1 60); do
    kubectl --kubeconfig /etc/kubernetes/kubelet.conf annotate --overwrite node $(hostname) machine=${MACHINE} && break
    sleep 1
done
"""

MASTER_FRAGMENTS = {
    "install": MASTER_INSTALL,
    "configure": MASTER_CONFIGURE,
}
