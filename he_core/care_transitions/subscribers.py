# he_core/care_transitions/subscribers.py
from he_core.care_transitions.services import CareTransitionService
from he_core.common.events import subscribe
from he_core.encounters.services import ENCOUNTER_DISCHARGED


@subscribe(ENCOUNTER_DISCHARGED)
def on_encounter_discharged(payload: dict) -> None:
    CareTransitionService.create_for_discharge(
        tenant_id=int(payload["tenant_id"]),
        encounter_id=int(payload["encounter_id"]),
        discharge_datetime=payload.get("discharge_datetime"),
    )
