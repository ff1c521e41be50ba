"""Combines the input sources of a job according to the input mode."""

from __future__ import annotations

import base64
import binascii
import hashlib
import html
from collections.abc import Callable
from typing import Any
from urllib.parse import quote_plus, unquote_to_bytes

from fuzzwell.command import CommandInput
from fuzzwell.models import Config, InputProviderConfig
from fuzzwell.wordlist import WordlistInput

_MODES = ("clusterbomb", "pitchfork", "sniper")

Encoder = Callable[[bytes], bytes]


def _text(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def _bytes(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _digest(name: str) -> Encoder:
    return lambda data: hashlib.new(name, data).hexdigest().encode("ascii")


_ENCODERS: dict[str, Encoder] = {
    "b64encode": base64.b64encode,
    "b64decode": lambda data: base64.b64decode(data, validate=True),
    "hexencode": binascii.hexlify,
    "hexdecode": binascii.unhexlify,
    "urlencode": lambda data: quote_plus(data).encode("ascii"),
    "urldecode": lambda data: unquote_to_bytes(data.replace(b"+", b" ")),
    "html": lambda data: _bytes(html.escape(_text(data))),
    "htmldecode": lambda data: _bytes(html.unescape(_text(data))),
    "lower": bytes.lower,
    "upper": bytes.upper,
    "md5": _digest("md5"),
    "sha1": _digest("sha1"),
    "sha256": _digest("sha256"),
    "sha512": _digest("sha512"),
}


def _build_chain(spec: str) -> list[Encoder]:
    chain = []
    for name in spec.strip().split(" "):
        try:
            chain.append(_ENCODERS[name])
        except KeyError:
            raise ValueError(f"Encoder {name} not found") from None
    return chain


class InputModeError(ValueError):
    """Raised for an unknown input mode."""


class MainInputProvider:
    """Yields keyword-to-value maps in clusterbomb, sniper or pitchfork order."""

    def __init__(self, config: Config) -> None:
        if config.input_mode not in _MODES:
            raise InputModeError(f"Input mode (-mode) {config.input_mode} not recognized")
        self.config = config
        self.providers: list[Any] = []
        self.encoders: dict[str, list[Encoder]] = {}
        self.position = 0
        self._msb_iterator = 0
        for provider in config.input_providers:
            self.add_provider(provider)

    def add_provider(self, provider: InputProviderConfig) -> None:
        """Add an input source; raise OSError for an unreadable wordlist, ValueError for an unknown encoder."""
        if provider.name == "command":
            self.providers.append(CommandInput(provider.keyword, provider.value, self.config))
        else:
            self.providers.append(WordlistInput(provider.keyword, provider.value, self.config))
        if provider.encoders:
            self.encoders[provider.keyword] = _build_chain(provider.encoders)

    def activate_keywords(self, keywords: list[str]) -> None:
        """Disable every source whose keyword is not listed."""
        for provider in self.providers:
            if provider.keyword not in keywords:
                provider.disable()

    def keywords(self) -> list[str]:
        return [provider.keyword for provider in self.providers]

    def _active(self) -> list[Any]:
        return [provider for provider in self.providers if provider.active]

    def advance(self) -> bool:
        """Move to the next combination; return False when all are used."""
        if self.position >= self.total():
            return False
        self.position += 1
        return True

    def value(self) -> dict[str, bytes]:
        """Return the inputs of the next combination, encoded where configured."""
        if self.config.input_mode == "pitchfork":
            values = self._pitchfork_value()
        else:
            values = self._clusterbomb_value()
        for key, data in values.items():
            chain = self.encoders.get(key)
            if not chain:
                continue
            try:
                for encode in chain:
                    data = encode(data)
            except ValueError as exc:
                print(f"ERROR: {exc}")
                data = b""
            values[key] = data
        return values

    def reset(self) -> None:
        for provider in self.providers:
            provider.reset_position()
        self.position = 0
        self._msb_iterator = 0

    def set_position(self, position: int) -> None:
        if self.config.input_mode == "pitchfork":
            for provider in self.providers:
                provider.position = position
            return
        self.reset()
        if position > self.total():
            return
        while self.position < position - 1:
            self.advance()
            self.value()

    def total(self) -> int:
        """Return the number of input combinations."""
        active = self._active()
        if self.config.input_mode == "pitchfork":
            return max((provider.total() for provider in active), default=0)
        count = 1
        for provider in active:
            count *= provider.total()
        return count

    def _pitchfork_value(self) -> dict[str, bytes]:
        values = {}
        for provider in self._active():
            if not provider.has_next():
                provider.reset_position()
            values[provider.keyword] = provider.value()
            provider.increment_position()
        return values

    def _clusterbomb_value(self) -> dict[str, bytes]:
        while True:
            values = {}
            signal_next = False
            restart = False
            for index, provider in enumerate(self._active()):
                if signal_next:
                    provider.increment_position()
                    signal_next = False
                if not provider.has_next():
                    if index == self._msb_iterator:
                        self._msb_iterator += 1
                        self._clusterbomb_iterator_reset()
                        restart = True
                        break
                    provider.reset_position()
                    signal_next = True
                values[provider.keyword] = provider.value()
                if index == 0:
                    provider.increment_position()
            if not restart:
                return values

    def _clusterbomb_iterator_reset(self) -> None:
        for index, provider in enumerate(self._active()):
            if index < self._msb_iterator:
                provider.reset_position()
            if index == self._msb_iterator:
                provider.increment_position()