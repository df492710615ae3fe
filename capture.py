#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import os
import re
import time

from email.policy import Compat32
from email.errors import MessageError
from email.parser import BytesHeaderParser

from randfile import rand_file


_FOLD = re.compile(r'\r?\n[ \t]+')


class MetadataParseError(ValueError):
    """Raised when the header block of a message cannot be parsed"""


class _RawHeaders(Compat32):
    """Strict compat32 that hands back header values as they were received"""

    def header_fetch_parse(self, name, value):
        return value


_STRICT = _RawHeaders(raise_on_defect=True)


class CapturedMessage:
    """A message as handed over by the SMTP session"""
    origin: tuple | str | None
    sender: str
    recipients: list[str]
    data: bytes

    def __init__(self, origin, sender: str, recipients: list[str], data: bytes):
        self.origin = origin
        self.sender = sender
        self.recipients = list(recipients)
        self.data = data

    def __repr__(self):
        return str(self)

    def __str__(self):
        return f'CapturedMessage(origin={self.origin}, sender={self.sender}, recipients={self.recipients}, size={len(self.data)})'


def subject_of(data: bytes) -> str | None:
    try:
        headers = BytesHeaderParser(policy=_STRICT).parsebytes(data)
    except (MessageError, ValueError) as e:
        raise MetadataParseError(f'Unable to parse message headers: {e!r}') from e

    subject = headers.get('Subject')
    if subject is None:
        return None

    # 8-bit header bytes arrive surrogate-escaped
    text = subject.encode('ascii', 'surrogateescape').decode('utf-8', 'replace')
    return _FOLD.sub(' ', text)


class Capture:
    """Writes every received message verbatim to a uniquely named file"""
    output: str
    extension: str
    verbose: bool
    logger: logging.Logger

    def __init__(self, output: str, extension: str, verbose: bool, logger: logging.Logger):
        self.output = output
        self.extension = extension
        self.verbose = verbose
        self.logger = logger

    def __call__(self, message: CapturedMessage) -> None:
        self.handle(message.origin, message.sender, message.recipients, message.data)

    def handle(self, origin, sender: str, recipients: list[str], data: bytes) -> None:
        if self.verbose:
            # The file still gets written when the headers are broken
            try:
                subject = subject_of(data)
                self.logger.info(f'Received mail from {sender!r} with subject {subject!r}')
            except MetadataParseError as e:
                self.logger.warning(f'Received mail from {sender!r}: {e}')

        try:
            f = rand_file(self.output, str(time.time_ns()), self.extension)
        except (OSError, ValueError) as e:
            self.logger.error(f'Dropping mail from {sender!r}: {e}')
            return

        try:
            with f:
                f.write(data)
        except OSError as e:
            self.logger.error(f'Unable to write {f.name!r}: {e}')
            self.__discard(f.name)
            return

        if self.verbose:
            self.logger.info(f'Wrote {f.name!r}')

    def __discard(self, name: str) -> None:
        try:
            os.remove(name)
        except OSError as e:
            self.logger.error(f'Unable to remove partial file {name!r}: {e}')
