#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sys
import threading

from typing import TextIO

from colorama import Fore


class Transcript:
    """Prints the lines read from and written to the wire"""
    color: bool
    stream: TextIO

    def __init__(self, color: bool = True, stream: TextIO | None = None):
        self.color = color
        self.stream = stream if stream is not None else sys.stdout
        self.__lock = threading.Lock()

    def read(self, origin, session_id: str, line: str) -> None:
        self.__print(Fore.GREEN, line)

    def write(self, origin, session_id: str, line: str) -> None:
        self.__print(Fore.CYAN, line)

    def __print(self, color: str, line: str) -> None:
        line = line.replace('\n', '\n  ')
        if self.color:
            line = color + line + Fore.RESET

        with self.__lock:
            self.stream.write(f'  {line}\n')
            self.stream.flush()
