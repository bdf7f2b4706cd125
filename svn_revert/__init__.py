"""svn-revert: revert the Subversion commits that turned a build unstable."""

from svn_revert.revert.messenger import Messenger
from svn_revert.revert.module_resolver import ModuleResolver
from svn_revert.revert.publisher import SvnRevertPublisher
from svn_revert.revert.reverter import SvnReverter
from svn_revert.svn.client import SvnClient, SvnCredentials
from svn_revert.svn.factory import SvnClientFactory

__version__ = "0.1.0"

__all__ = [
    "Messenger",
    "ModuleResolver",
    "SvnClient",
    "SvnClientFactory",
    "SvnCredentials",
    "SvnRevertPublisher",
    "SvnReverter",
]
