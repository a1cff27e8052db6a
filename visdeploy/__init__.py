"""visdeploy - Debugger visualizer deployment for Visual Studio"""

__version__ = '1.0.0'
__author__ = 'visdeploy Development Team'

from .deployer import VersionGatedDeployer, deploy_all, deploy_if_newer
from .package import VisualizerPackage

__all__ = ['VersionGatedDeployer', 'VisualizerPackage', 'deploy_if_newer', 'deploy_all']
