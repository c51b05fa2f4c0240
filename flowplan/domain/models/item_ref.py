"""Stage item references.

Items in a stage's order are either a prompt assignment or one of the
stage's two auto-prompt slots. Slots are stored as synthetic string ids;
these models are the parsed form.
"""

from typing import Literal, Union

from pydantic import BaseModel

from flowplan.domain.models.auto_prompt import AutoPromptKind
from flowplan.domain.synthetic_ids import auto_prompt_id


class PromptRef(BaseModel):
    model_config = {"frozen": True}

    ref: Literal["prompt"] = "prompt"
    prompt_id: str

    @property
    def item_id(self) -> str:
        return self.prompt_id


class AutoSlot(BaseModel):
    model_config = {"frozen": True}

    ref: Literal["auto"] = "auto"
    kind: AutoPromptKind
    stage_id: str

    @property
    def item_id(self) -> str:
        return auto_prompt_id(self.kind, self.stage_id)


ItemRef = Union[PromptRef, AutoSlot]


def parse_item_id(item_id: str, stage_id: str) -> ItemRef:
    """Parse a stored item id in the namespace of one stage.

    Only the exact synthetic ids minted for ``stage_id`` become AutoSlots.
    Another stage's synthetic id is returned as a PromptRef, which will not
    match any prompt assignment and is dropped by reconciliation.
    """
    for kind in AutoPromptKind:
        if item_id == auto_prompt_id(kind, stage_id):
            return AutoSlot(kind=kind, stage_id=stage_id)
    return PromptRef(prompt_id=item_id)
