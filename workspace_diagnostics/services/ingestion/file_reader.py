import aiofiles
import aiofiles.os


async def read_text_file(path: str) -> str:
    """
    Read a whole file without blocking the event loop.

    open -> stat -> read -> close, each step awaited. The size from the stat
    of the open descriptor bounds the read. Any OSError propagates; the
    pipeline decides that a failed read is a skipped file.
    """
    async with aiofiles.open(path, "rb") as handle:
        stat_result = await aiofiles.os.stat(handle.fileno())
        data = await handle.read(stat_result.st_size)

    return data.decode("utf-8", errors="replace")
