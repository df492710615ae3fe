#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from queue import Queue
from aiosmtpd.controller import Controller
from aiosmtpd.smtp import SMTP, Envelope, Session

from capture import CapturedMessage
from transcript import Transcript

APPNAME = 'SMTPDump'

# Longest partial line held back from the transcript
PENDING_LIMIT = 8192


class SmtpDumpHandler:
    """An SMTP handler that hands every message over to a queue"""
    queue: Queue

    def __init__(self, queue: Queue):
        self.queue = queue

    async def handle_DATA(self, server: SMTP, session: Session, envelope: Envelope) -> str:
        data = envelope.original_content
        if data is None:
            data = envelope.content or b''
        if isinstance(data, str):
            data = data.encode('utf-8', 'surrogateescape')

        self.queue.put(CapturedMessage(session.peer, envelope.mail_from, envelope.rcpt_tos, data))

        return '250 Message accepted for delivery'


class DumpSMTP(SMTP):
    """An SMTP session that reports every line on the wire to a transcript"""
    transcript: Transcript | None

    def __init__(self, handler, *, transcript: Transcript | None = None, **kwargs):
        super().__init__(handler, **kwargs)
        self.transcript = transcript
        self.__pending = b''

    @property
    def session_id(self) -> str:
        return f'{id(self.session):x}'

    def data_received(self, data: bytes) -> None:
        if self.transcript is not None:
            lines = (self.__pending + data).split(b'\r\n')
            self.__pending = lines.pop()
            if len(self.__pending) >= PENDING_LIMIT:
                lines.append(self.__pending)
                self.__pending = b''
            for line in lines:
                self.__report(line)

        super().data_received(data)

    def connection_lost(self, error) -> None:
        if self.transcript is not None and self.__pending:
            self.__report(self.__pending)
            self.__pending = b''

        super().connection_lost(error)

    def __report(self, line: bytes) -> None:
        peer = self.session.peer if self.session is not None else None
        self.transcript.read(peer, self.session_id, line.decode('utf-8', 'replace'))

    async def push(self, status):
        if self.transcript is not None:
            line = status if isinstance(status, str) else status.decode('utf-8', 'replace')
            self.transcript.write(self.session.peer, self.session_id, line)

        await super().push(status)


class DumpController(Controller):
    """A threaded controller that serves DumpSMTP sessions"""
    transcript: Transcript | None

    def __init__(self, handler, *, transcript: Transcript | None = None, **kwargs):
        kwargs.setdefault('ident', APPNAME)
        super().__init__(handler, **kwargs)
        self.transcript = transcript

    def factory(self):
        return DumpSMTP(self.handler, transcript=self.transcript, **self.SMTP_kwargs)
