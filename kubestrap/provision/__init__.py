"""

.. _startup:

kubestrap.provision
-------------------

fullScript
~~~~~~~~~~

Rendered for machines booted from a plain Ubuntu image. The script
installs docker, kubelet and kubeadm (``install``) and then initializes
the control plane or joins the cluster (``configure``).

preloadedScript
~~~~~~~~~~~~~~~

Rendered for machines booted from an image built with
``generatePreloadedImage``. Only the ``configure`` part is executed.

generatePreloadedImage
~~~~~~~~~~~~~~~~~~~~~~

Installs the packages of a role and pulls a list of docker images. Run
it on a builder machine to create an image for ``preloadedScript``.

All scripts log to ``/var/log/startup.log`` on the machine.
See :py:class:`kubestrap.provision.startup.StartupScripts`
"""
