from dataclasses import dataclass, field


@dataclass
class InterfaceSample:
    name: str = ""
    rx_bytes: int = 0
    tx_bytes: int = 0


@dataclass
class CounterSnapshot:
    down: int = 0
    up: int = 0


@dataclass
class RateSample:
    down: float = 0.0
    up: float = 0.0


@dataclass
class SpeedParts:
    amount: str = "0"
    unit: str = "B/s"


@dataclass
class SpeedDisplay:
    download_text: str = ""
    upload_text: str = ""


@dataclass
class SamplerState:
    previous: CounterSnapshot = field(default_factory=CounterSnapshot)
    sampled_at: float = 0.0


@dataclass
class NetworkSpeed:
    success: bool = False
    error: str | None = None
    rate: RateSample = field(default_factory=RateSample)
    display: SpeedDisplay = field(default_factory=SpeedDisplay)
    updated: str | None = None
