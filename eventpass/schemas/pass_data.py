#
# pass_data.py
# Pydantic schema for the data drawn onto an event pass
#

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional


class PassData(BaseModel):
    """Team record consumed by the pass generator.

    Field values are trusted as-is: no email or phone format checks.
    Accepts camelCase keys (``teamId``) as well as snake_case.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    team_id: str
    team_name: str
    event_name: str
    college_name: str
    captain_name: Optional[str] = None  # Barcode only
    captain_email: Optional[str] = None  # Barcode only
    captain_phone: Optional[str] = None  # Barcode only
    payment_status: Optional[str] = None  # Barcode falls back to "PAID"
