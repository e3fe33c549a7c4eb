"""Configuration management for gossip latency experiments."""

from typing import Literal, Optional
from pathlib import Path
from pydantic import BaseModel, Field, field_validator, model_validator
import json


class PopulationConfig(BaseModel):
    """Configuration for per-city population sizes."""

    small: int = Field(default=10_000, ge=1, description="Residents in a small city")
    large: int = Field(default=300_000, ge=1, description="Residents in a large city")
    p_small: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Probability that a city is small",
    )
    p_car: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Probability a person owns a car"
    )
    p_net: float = Field(
        default=0.9, ge=0.0, le=1.0, description="Probability a person is online"
    )

    @model_validator(mode="after")
    def validate_sizes(self) -> "PopulationConfig":
        """Large cities must not be smaller than small ones."""
        if self.large < self.small:
            raise ValueError("large population must be >= small population")
        return self


class WiringConfig(BaseModel):
    """Configuration for the edge wiring passes."""

    p_local: float = Field(
        default=0.01, ge=0.0, le=1.0, description="Probability of a local random link"
    )
    p_clique: float = Field(
        default=0.10, ge=0.0, le=1.0, description="Probability of clique closure"
    )
    local_weight: int = Field(default=1, ge=0, description="Hours for a local hop")
    internet_weight: int = Field(default=0, ge=0, description="Hours for an internet link")
    bridge_weight: int = Field(default=3, ge=0, description="Hours for an inter-city commute")
    strategy: Literal["exhaustive", "sampled"] = Field(
        default="exhaustive",
        description="Pair enumeration for local/clique passes",
    )


class ExperimentConfig(BaseModel):
    """Configuration for repeated relay trials."""

    trials: int = Field(default=100, ge=1, description="Number of relay trials")
    source_city: int = Field(default=0, ge=0, description="Index of the source city")
    destination_city: int = Field(
        default=-1, description="Index of the destination city (-1 = last)"
    )
    max_rounds: Optional[int] = Field(
        default=None, ge=1, description="Round cap per relay (None = unbounded)"
    )
    max_seconds: Optional[float] = Field(
        default=None, gt=0.0, description="Wall-time cap per relay (None = unbounded)"
    )


class Config(BaseModel):
    """Main configuration for gossip latency experiments."""

    # Random seed
    seed: int = Field(default=42, description="Random seed for reproducibility")

    # World
    n_cities: int = Field(default=10, ge=2, description="Number of cities")
    population: PopulationConfig = Field(
        default_factory=PopulationConfig, description="Population sizes"
    )
    wiring: WiringConfig = Field(
        default_factory=WiringConfig, description="Edge wiring probabilities"
    )

    # Trials
    experiment: ExperimentConfig = Field(
        default_factory=ExperimentConfig, description="Relay trial settings"
    )

    # Output
    output_dir: str = Field(
        default="runs/exp001", description="Output directory for results"
    )
    export_dot: bool = Field(
        default=False, description="Write the graph in DOT notation"
    )

    @field_validator("n_cities")
    @classmethod
    def validate_n_cities(cls, v: int) -> int:
        """Validate the city count is reasonable."""
        if v > 10_000:
            raise ValueError("n_cities should be <= 10,000")
        return v

    @model_validator(mode="after")
    def validate_city_indices(self) -> "Config":
        """Source and destination must name existing cities."""
        for name in ("source_city", "destination_city"):
            idx = getattr(self.experiment, name)
            if not -self.n_cities <= idx < self.n_cities:
                raise ValueError(f"{name}={idx} out of range for {self.n_cities} cities")
        return self

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return self.model_dump()

    def to_json(self) -> str:
        """Convert config to JSON string."""
        return self.model_dump_json(indent=2)

    def save(self, path: Path | str) -> None:
        """Save config to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(self.to_json())

    @classmethod
    def load(cls, path: Path | str) -> "Config":
        """Load config from JSON file."""
        path = Path(path)
        with open(path, "r") as f:
            data = json.load(f)
        return cls(**data)

    @classmethod
    def reference(cls) -> "Config":
        """Create the reference experiment: 10 cities, 100 trials first -> last."""
        return cls()

    @classmethod
    def toy(cls) -> "Config":
        """Create toy config: 3 tiny cities, quick to build and relay."""
        return cls(
            seed=42,
            n_cities=3,
            population=PopulationConfig(small=20, large=40),
            wiring=WiringConfig(p_local=0.1, p_clique=0.3),
            experiment=ExperimentConfig(trials=10, max_rounds=10_000),
        )
