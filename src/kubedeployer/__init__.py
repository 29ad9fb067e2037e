"""
kubedeployer - Build, push and roll out the test-automation service to Kubernetes
"""

__version__ = "0.1.0"

from .core import Deployer
from .errors import DeployerError

__all__ = ["Deployer", "DeployerError"]
