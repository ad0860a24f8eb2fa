"""Start an untwine process and follow its progress through a pipe.

The child writes length-prefixed messages to the descriptor it is given
with ``--progress_fd``. A progress message is the id 1000, a 32-bit percent
and a string; an error message is the id 1001 and a string. Strings are a
32-bit byte count followed by the bytes.
"""

from __future__ import annotations

import argparse
import os
import signal
import struct
import subprocess
import sys
import threading
import time
from collections.abc import Iterable, Mapping, Sequence

PROGRESS_MSG = 1000
ERROR_MSG = 1001

_ID = struct.Struct("=i")
_UINT = struct.Struct("=I")

Options = Iterable[tuple[str, str]] | Mapping[str, str]


def _read_string(buf: bytes | bytearray, pos: int) -> tuple[str, int] | None:
    """Read a length-prefixed string at ``pos``; None if it is incomplete."""
    if len(buf) < pos + _UINT.size:
        return None
    (size,) = _UINT.unpack_from(buf, pos)
    start = pos + _UINT.size
    if len(buf) < start + size:
        return None
    text = bytes(buf[start:start + size]).decode("utf-8", errors="replace")
    return text, start + size


class UntwineClient:
    """Runs the untwine program and reports its progress and errors.

    ``untwine_path`` is the program to run, or a sequence of arguments that
    starts it.
    """

    def __init__(self, untwine_path: str | os.PathLike | Sequence[str]):
        if isinstance(untwine_path, (str, os.PathLike)):
            self._command = [os.fspath(untwine_path)]
        else:
            self._command = [os.fspath(part) for part in untwine_path]
        if not self._command:
            raise ValueError("no untwine program given")
        self._process: subprocess.Popen | None = None
        self._reader: threading.Thread | None = None
        self._lock = threading.Lock()
        self._pending = bytearray()
        self._running = False
        self._percent = 0
        self._progress_msg = ""
        self._error_msg = ""

    def __enter__(self) -> UntwineClient:
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    @property
    def path(self) -> str:
        return self._command[-1]

    def start(self, files: Iterable[str], output_dir: str | os.PathLike,
              options: Options | None = None) -> None:
        """Start untwine on ``files``, writing to ``output_dir``.

        Raises RuntimeError if already running, ValueError if there are no
        files or no output directory, and OSError if the program can't start.
        """
        if self._running:
            raise RuntimeError("untwine is already running")
        files = [os.fspath(f) for f in files]
        output_dir = os.fspath(output_dir)
        if not files or not output_dir:
            raise ValueError("input files and an output directory are required")

        if options is None:
            opts: list[tuple[str, str]] = []
        elif isinstance(options, Mapping):
            opts = [(str(k), str(v)) for k, v in options.items()]
        else:
            opts = [(str(k), str(v)) for k, v in options]
        opts.append(("files", ", ".join(files)))
        opts.append(("output_dir", output_dir))
        self._launch(opts)

    def _launch(self, opts: list[tuple[str, str]]) -> None:
        read_fd, write_fd = os.pipe()
        try:
            kwargs: dict = {}
            if os.name == "nt":
                import msvcrt

                handle = msvcrt.get_osfhandle(write_fd)
                os.set_handle_inheritable(handle, True)
                info = subprocess.STARTUPINFO()
                info.lpAttributeList = {"handle_list": [handle]}
                kwargs["startupinfo"] = info
                kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW
                progress = str(handle)
            else:
                kwargs["pass_fds"] = (write_fd,)
                progress = str(write_fd)
            opts = opts + [("progress_fd", progress)]
            args = list(self._command)
            for name, value in opts:
                args.extend(("--" + name, value))
            process = subprocess.Popen(args, **kwargs)
        except BaseException:
            os.close(read_fd)
            os.close(write_fd)
            raise
        os.close(write_fd)

        with self._lock:
            self._pending.clear()
        self._process = process
        self._reader = threading.Thread(target=self._read_loop, args=(read_fd,), daemon=True)
        self._reader.start()
        self._running = True

    def _read_loop(self, fd: int) -> None:
        try:
            while chunk := os.read(fd, 4096):
                with self._lock:
                    self._pending.extend(chunk)
        except OSError:
            pass
        finally:
            os.close(fd)

    def stop(self) -> bool:
        """Interrupt the child and wait for it; False if it wasn't running."""
        if not self._running or self._process is None:
            return False
        if os.name == "nt":
            self._process.terminate()
        else:
            self._process.send_signal(signal.SIGINT)
        self._process.wait()
        self._child_stopped()
        return True

    def running(self) -> bool:
        """True while the child process is alive."""
        if self._running and self._process is not None and self._process.poll() is not None:
            self._child_stopped()
        return self._running

    def _child_stopped(self) -> None:
        self._running = False
        if self._reader is not None:
            self._reader.join(timeout=5)
            self._reader = None
        self._process = None

    def _read_pipe(self) -> None:
        """Apply every complete message received so far."""
        with self._lock:
            buf = self._pending
            pos = 0
            while len(buf) >= pos + _ID.size:
                (msg_id,) = _ID.unpack_from(buf, pos)
                body = pos + _ID.size
                if msg_id == PROGRESS_MSG:
                    if len(buf) < body + _UINT.size:
                        break
                    (percent,) = _UINT.unpack_from(buf, body)
                    parsed = _read_string(buf, body + _UINT.size)
                    if parsed is None:
                        break
                    self._percent = percent
                    self._progress_msg, pos = parsed
                elif msg_id == ERROR_MSG:
                    parsed = _read_string(buf, body)
                    if parsed is None:
                        break
                    self._error_msg, pos = parsed
                else:
                    # The stream can't be resynchronised after an unknown id.
                    pos = len(buf)
                    break
            del buf[:pos]

    def progress_percent(self) -> int:
        self._read_pipe()
        return self._percent

    def progress_message(self) -> str:
        self._read_pipe()
        return self._progress_msg

    def error_message(self) -> str:
        self._read_pipe()
        return self._error_msg


def main(argv: Sequence[str] | None = None) -> int:
    """Run untwine on some files and print its progress until it finishes."""
    parser = argparse.ArgumentParser(description="Run untwine and report its progress.")
    parser.add_argument("untwine", help="path of the untwine program")
    parser.add_argument("files", nargs="+", help="input files or directories")
    parser.add_argument("-o", "--output-dir", default="./out")
    parser.add_argument("--dims", help="dimensions to keep, comma separated")
    parser.add_argument("--interval", type=float, default=1.0,
                        help="seconds between progress reports")
    args = parser.parse_args(argv)

    options = [("dims", args.dims)] if args.dims else []
    client = UntwineClient(args.untwine)
    try:
        client.start(args.files, args.output_dir, options)
    except OSError:
        print(f"Couldn't start '{args.untwine}'!", file=sys.stderr)
        return 1

    while True:
        time.sleep(args.interval)
        percent = client.progress_percent()
        message = client.progress_message()
        print(f"Percent/Msg = {percent} / {message}!", file=sys.stderr)
        if not client.running():
            break
    print(f"Error = {client.error_message()}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())