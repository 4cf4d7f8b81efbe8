# phm/services/observations.py
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class ExtractedObservation:
    observation_type: str
    category: str
    key: str
    value: str
    confidence: str = "high"
    context: Optional[str] = None


class PlaceholderExtractor:
    """
    Stand-in for the AI extraction provider. Returns the same two boiler
    observations for every transcript so the rest of the flow can be built
    and tested end to end.
    """

    def extract(self, transcript_text: str) -> List[ExtractedObservation]:
        return [
            ExtractedObservation(
                observation_type="boiler_make",
                category="equipment",
                key="existing_boiler_manufacturer",
                value="Worcester Bosch",
                confidence="high",
                context="Customer mentioned Worcester Bosch boiler",
            ),
            ExtractedObservation(
                observation_type="boiler_age",
                category="equipment",
                key="existing_boiler_age",
                value="15 years",
                confidence="high",
                context="Boiler installed 15 years ago",
            ),
        ]


def get_extractor() -> PlaceholderExtractor:
    return PlaceholderExtractor()
