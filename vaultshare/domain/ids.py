"""Unique id generation for vault entities."""

import secrets
import time
from itertools import count
from typing import Callable, Iterable

from vaultshare.errors import IdCollisionError


class IdGenerator:
    """Produces ids of the form ``<epoch-millis>-<counter>-<random hex>``.

    The counter makes ids issued by one generator distinct even when they are
    created in the same millisecond; the random suffix keeps ids from
    different clients apart.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        suffix: Callable[[], str] = lambda: secrets.token_hex(4),
    ) -> None:
        self._clock = clock
        self._suffix = suffix
        self._counter = count()
        self._issued: set[str] = set()

    def reserve(self, ids: Iterable[str], *, replace: bool = False) -> None:
        """Mark ids already present in a vault as taken.

        With ``replace`` earlier reservations are forgotten first. Ids this
        generator issues stay distinct through the counter either way.
        """
        if replace:
            self._issued = set()
        self._issued.update(ids)

    def __contains__(self, id_: str) -> bool:
        return id_ in self._issued

    def new_id(self) -> str:
        """Return an id never issued or reserved before.

        Raises:
            IdCollisionError: if the produced id is already taken
        """
        millis = int(self._clock() * 1000)
        new_id = f"{millis}-{next(self._counter)}-{self._suffix()}"
        if new_id in self._issued:
            raise IdCollisionError(f"Generated id {new_id} is already in use")
        self._issued.add(new_id)
        return new_id
