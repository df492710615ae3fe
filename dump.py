#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse
import logging
import sys
import threading

from queue import Queue, Empty

from capture import Capture, CapturedMessage
from config import Config
from smtp import DumpController, SmtpDumpHandler
from transcript import Transcript


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Dump every received mail to a file')
    parser.add_argument('--hostname', help='Server host name')
    parser.add_argument('--addr', help='Listen address:port (default 127.0.0.1:2525)')
    parser.add_argument('--output', help='Output directory (default to current directory)')
    parser.add_argument('--extension', help='Saved file extension (default eml)')
    parser.add_argument('--color', action=argparse.BooleanOptionalAction, default=None, help='Color debug output')
    parser.add_argument('--debug', action='store_true', default=None, help='Debug output')
    parser.add_argument('--verbose', action='store_true', default=None, help='Verbose output')
    parser.add_argument('--workers', type=int, help='Number of capture workers (default 4)')
    return parser.parse_args(argv)


def drain(queue: Queue, capture: Capture, stop: threading.Event) -> None:
    while not stop.is_set():
        try:
            message: CapturedMessage = queue.get(True, timeout=1.0)
        except Empty:
            continue

        try:
            capture(message)
        finally:
            queue.task_done()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    config = Config()
    config.update(**vars(args))

    errors = config.get_validation_errors()
    if len(errors) > 0:
        print('The configuration contains errors:', file=sys.stderr)

        for error in errors:
            print(f'> {error}', file=sys.stderr)

        return 1

    logging.basicConfig(
        level=logging.INFO if config.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(message)s'
    )
    logger = logging.getLogger('smtpdump')

    capture = Capture(config.output, config.extension, config.verbose, logger)
    transcript = Transcript(config.color) if config.debug else None

    mail_queue = Queue()
    stop = threading.Event()
    workers = [
        threading.Thread(target=drain, args=(mail_queue, capture, stop), name=f'capture-{i}', daemon=True)
        for i in range(config.workers)
    ]
    for worker in workers:
        worker.start()

    controller = DumpController(
        SmtpDumpHandler(mail_queue),
        hostname=config.host,
        port=config.port,
        server_hostname=config.hostname,
        transcript=transcript
    )

    controller.start()
    if config.verbose:
        logger.info(f'Listening on {config.addr!r} ...')

    try:
        stop.wait()
    except KeyboardInterrupt:
        pass
    finally:
        controller.stop()
        mail_queue.join()
        stop.set()

    return 0


if __name__ == '__main__':
    sys.exit(main())
