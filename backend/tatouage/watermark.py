# Watermarking and verification built on the metadata codec

import logging
import os
import shutil
import tempfile
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout

from . import metadata
from .errors import CodecError, NotFound

log = logging.getLogger(__name__)


class WatermarkService:
    """Copies an image and tattoos a token into the copy.

    The copy is prepared in a temporary file next to the target and only
    renamed onto the target once the token is written, so a failure never
    leaves a half-tattooed file behind. Writes to the same target path are
    serialized.
    """

    def __init__(self, codec=metadata, timeout: float = 10.0, default_token: str = 'ID_Patient:12345'):
        self.codec = codec
        self.timeout = timeout
        self.default_token = default_token
        self._locks = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, path):
        with self._locks_guard:
            return self._locks[os.path.abspath(path)]

    def _call(self, fn, *args):
        # Metadata work runs in a worker so a stuck file cannot hang the request
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            return executor.submit(fn, *args).result(timeout=self.timeout)
        except FutureTimeout:
            raise CodecError(f'Metadata operation timed out after {self.timeout}s')
        finally:
            executor.shutdown(wait=False)

    def watermark(self, source: str, token: str, target: str) -> bytes:
        """Write ``token`` into a copy of ``source`` saved at ``target``.

        Returns the bytes committed at ``target``, read while the path lock
        is still held.
        """
        if not os.path.isfile(source):
            raise NotFound(f'File not found: {os.path.basename(source)}')
        token = token or self.default_token
        target_dir = os.path.dirname(os.path.abspath(target))
        os.makedirs(target_dir, exist_ok=True)

        with self._lock_for(target):
            fd, tmp_path = tempfile.mkstemp(prefix='.tatouage-', dir=target_dir)
            os.close(fd)
            try:
                shutil.copyfile(source, tmp_path)
                self._call(self.codec.write, tmp_path, token)
                os.replace(tmp_path, target)
                with open(target, 'rb') as f:
                    payload = f.read()
            except BaseException:
                log.warning(f'Watermarking {source} failed, discarding {tmp_path}')
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise

        log.info(f'Watermarked {source} -> {target}')
        return payload

    def verify(self, path: str):
        """Return the token carried by the image at ``path``, or None."""
        return self._call(self.codec.read, path)
