"""
Schema for one labelled error report in the training corpus.
"""

from typing import Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr


class TrainingRecord(BaseModel):
    """An error report: message text, callstack and its category label."""

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    # any JSON number; booleans and numeric strings are rejected
    id: Union[StrictInt, StrictFloat]
    text: StrictStr
    callstack: StrictStr
    category: StrictStr
