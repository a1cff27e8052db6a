import logging
import threading
import time
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

# Files below this size are still being written
MIN_ASSEMBLY_SIZE = 10


class AssemblyFileHandler(FileSystemEventHandler):
    """Redeploys a listed assembly once its events have been quiet for `debounce` seconds."""

    def __init__(self, watcher, debounce=1.0):
        self.watcher = watcher
        self.debounce = debounce
        self.pending = {}
        self._lock = threading.Lock()

    def _handle(self, src_path):
        file_path = Path(src_path)
        if file_path.name not in self.watcher.file_names:
            return
        with self._lock:
            timer = self.pending.get(file_path.name)
            if timer is not None and timer.is_alive():
                timer.cancel()
                logger.debug(f"Debouncing: {file_path.name}")
            timer = threading.Timer(self.debounce, self._settled, args=(file_path,))
            timer.daemon = True
            self.pending[file_path.name] = timer
            timer.start()

    def _settled(self, file_path):
        try:
            size = file_path.stat().st_size
        except OSError as e:
            logger.debug(f"Ignoring {file_path.name}: {e}")
            return
        if size < MIN_ASSEMBLY_SIZE:
            logger.debug(f"Ignoring empty file: {file_path.name}")
            return
        print(f"\n📝 Change detected: {file_path.name}")
        self.watcher.redeploy(file_path.name)

    def cancel_pending(self):
        with self._lock:
            for timer in self.pending.values():
                timer.cancel()
            self.pending.clear()

    def on_created(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_modified(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_moved(self, event):
        # Build tools often write to a temp name and rename into place
        if not event.is_directory:
            self._handle(event.dest_path)


class AssemblyWatcher:
    def __init__(self, source_dir, destination_dir, file_names, deployer, debounce=1.0):
        self.source_dir = Path(source_dir)
        self.destination_dir = Path(destination_dir)
        self.file_names = set(file_names)
        self.deployer = deployer
        self.debounce = debounce
        self.observer = None
        self.event_handler = None
        self.results = {}  # Last result per file name
        self._deploy_lock = threading.Lock()

    def redeploy(self, file_name):
        # Timers fire on their own threads; deploy one file at a time
        with self._deploy_lock:
            result = self.deployer.deploy_if_newer(
                self.source_dir / file_name,
                self.destination_dir / file_name,
            )
            self.results[file_name] = result
        if result.succeeded:
            print(f"✓ {file_name}: {result.label}")
        else:
            print(f"⚠️  {file_name}: {result.reason}")
        return result

    def start(self, block=True):
        self.event_handler = AssemblyFileHandler(self, debounce=self.debounce)
        self.observer = Observer()
        self.observer.schedule(self.event_handler, str(self.source_dir), recursive=False)
        self.observer.start()
        print(f"\n👁️  Watching directory: {self.source_dir}")
        print(f"📦 Deploying to: {self.destination_dir}")
        print("⏸️  Press Ctrl+C to stop...\n")

        if not block:
            return
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self):
        if self.event_handler:
            self.event_handler.cancel_pending()
        if self.observer:
            self.observer.stop()
            self.observer.join()
            self.observer = None
            print("\n✓ Monitoring stopped")
