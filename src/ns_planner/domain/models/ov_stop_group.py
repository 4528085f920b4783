"""Configured local-transit stop group."""

from dataclasses import dataclass


@dataclass(frozen=True)
class OvStopGroup:
    """A labelled set of OVAPI timing points, e.g. the trams at Rotterdam Centraal."""

    code: str
    label: str
    stop_codes: tuple[str, ...]
