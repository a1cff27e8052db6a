"""Load-time adapter: deploys the visualizers when the extension starts.

Two modes:

- baseline (``strict=False``): any error is logged and swallowed, the batch
  stops at the first failing file, and loading always reports success.
  This matches how the extension has always behaved on load.
- strict (``strict=True``): every file is attempted, the aggregate report is
  kept on ``last_report``, and success is only reported when every file was
  evaluated without failure. Host lookup errors propagate.
"""

import asyncio
import logging
from typing import Optional, Sequence

from .config import VISUALIZER_ASSEMBLY_NAMES, visualizers_dir
from .deployer import DeploymentReport, VersionGatedDeployer
from .host import DEFAULT_PROG_ID, resolve_visual_studio_dir

logger = logging.getLogger(__name__)


class VisualizerPackage:
    """Deploys the visualizer assemblies into the Visual Studio user folder."""

    def __init__(self, source_dir,
                 file_names: Sequence[str] = VISUALIZER_ASSEMBLY_NAMES,
                 visual_studio_dir=None,
                 prog_id: str = DEFAULT_PROG_ID,
                 strict: bool = False,
                 deployer: Optional[VersionGatedDeployer] = None):
        """Initialize package.

        Args:
            source_dir: Folder the assemblies ship in
            file_names: Ordered list of files to deploy
            visual_studio_dir: Visual Studio user folder; looked up over COM if None
            prog_id: COM ProgID used for the lookup
            strict: Isolate per-file failures and report them
            deployer: Deployer to use (default: VersionGatedDeployer())
        """
        self.source_dir = source_dir
        self.file_names = tuple(file_names)
        self.visual_studio_dir = visual_studio_dir
        self.prog_id = prog_id
        self.strict = strict
        self.deployer = deployer or VersionGatedDeployer()
        self.last_report: Optional[DeploymentReport] = None

    def _run(self) -> DeploymentReport:
        vs_dir = resolve_visual_studio_dir(self.visual_studio_dir, self.prog_id)
        destination = visualizers_dir(vs_dir)
        return self.deployer.deploy_all(
            self.file_names,
            self.source_dir,
            destination,
            isolate_failures=self.strict,
        )

    def initialize(self) -> bool:
        """Deploy the visualizers.

        Returns:
            True if loading succeeded (always True in baseline mode)
        """
        if self.strict:
            self.last_report = self._run()
            if not self.last_report.ok:
                logger.warning(f"Visualizer deployment incomplete: {self.last_report}")
            return self.last_report.ok

        try:
            self.last_report = self._run()
        except Exception as e:
            logger.error(f"Visualizer deployment failed: {e}", exc_info=True)
        return True

    async def initialize_async(self) -> bool:
        """Deploy without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.initialize)
