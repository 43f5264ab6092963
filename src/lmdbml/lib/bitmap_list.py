"""Main bitmap list reader class."""

from pathlib import Path
from pydantic import BaseModel
from typing import List, Optional
import logging

from .container import ContainerHeader, ContainerParser
from .entries import EntryInfo
from .exceptions import IOFailureError
from .stream import ByteStream, FileSink, MemorySink
from ..utils import derive_output_filename

logger = logging.getLogger(__name__)


class BitmapList(BaseModel):
    """
    The main class for reading a bitmap list container.

    Opening a file parses its header and every entry header; entry payloads are
    only decoded on request, straight from the file, without loading the whole
    container into memory.
    """

    filepath: str
    verify_compressed_size: bool = True
    header: Optional[ContainerHeader] = None
    entries: List[EntryInfo] = []

    def __init__(self, filepath: str, **data):
        super().__init__(filepath=str(filepath), **data)
        self.parse()

    @property
    def is_bitmap_list(self) -> bool:
        return self.header is not None and self.header.is_bitmap_list

    def parse(self):
        """
        Parses the container header and the header of every entry.
        """
        with self._open() as f:
            parser = self._parser(f)
            self.header = parser.read_header()
            self.entries = [info for _, info, _ in parser.iter_entries()]

    def read_entry(self, index: int) -> bytes:
        """Decodes entry `index` and returns its bytes."""
        with self._open() as f:
            parser = self._parser(f)
            parser.read_header()
            _, chunks = parser.open_entry(index)
            sink = MemorySink()
            for chunk in chunks:
                sink.append(chunk)
            sink.finalize()
            return sink.getvalue()

    def extract(self, output_dir: Optional[str] = None) -> List[Path]:
        """Writes every entry to `<stem>.<index>.bmp`. See `extract_bitmaps`."""
        return extract_bitmaps(self.filepath, output_dir, verify_compressed_size=self.verify_compressed_size)

    def _parser(self, fileobj) -> ContainerParser:
        return ContainerParser(ByteStream(fileobj), verify_compressed_size=self.verify_compressed_size)

    def _open(self):
        return _open_container(self.filepath)


def _open_container(filepath: str):
    try:
        return open(filepath, "rb")
    except OSError as e:
        raise IOFailureError(e.errno, f"cannot open {filepath}: {e}") from e


def extract_bitmaps(
    filepath: str, output_dir: Optional[str] = None, verify_compressed_size: bool = True
) -> List[Path]:
    """
    Streams every entry of a container to `<stem>.<index>.bmp`.

    Entries are decoded straight from the file in offset-table order. If one
    fails, the files already written are kept, the failing entry's partial
    file is removed and the error propagates.

    Args:
        filepath: Path of the container file
        output_dir: Directory for the output files (defaults to the container's directory)
        verify_compressed_size: Bound compressed entries by their stored compressed size

    Returns:
        Paths of the files written; empty for a container that holds no images
    """
    written = []

    def sink_factory(index: int) -> FileSink:
        sink = FileSink(derive_output_filename(filepath, index, output_dir))
        written.append(sink.path)
        return sink

    with _open_container(filepath) as f:
        parser = ContainerParser(ByteStream(f), verify_compressed_size=verify_compressed_size)
        header = parser.read_header()
        if not header.is_bitmap_list:
            logger.info("Does not contain images")
            return []

        if output_dir is not None:
            try:
                Path(output_dir).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise IOFailureError(e.errno, f"cannot create {output_dir}: {e}") from e

        for info, sink in parser.parse(sink_factory):
            logger.debug(f"  entry {info.index}: {sink.path} ({info.decoded_size} bytes)")

    logger.info(f"Extracted {len(written)} bitmaps")
    return written
