"""Local-ID to store-ID map for one import run."""


class ReconciliationMap:
    """Maps payload-local program/workout IDs to the IDs the store assigned.

    A local ID is the explicit ``id`` of an input row or, when the row has
    none, its 1-based position in its input collection. One instance lives
    for exactly one import run.

    An unmapped ID may still name an existing store row, unless the payload
    claims it: a row with that local ID failed to import, or the collection
    was identified by position, in which case every small integer is a
    position in this payload.
    """

    def __init__(self) -> None:
        self._programs: dict[int, int] = {}
        self._workouts: dict[int, int] = {}
        self._failed_programs: set[int] = set()
        self._failed_workouts: set[int] = set()
        self.positional_programs = False
        self.positional_workouts = False

    def record_program(self, local_id: int, store_id: int) -> None:
        self._programs[local_id] = store_id
        self._failed_programs.discard(local_id)

    def record_workout(self, local_id: int, store_id: int) -> None:
        self._workouts[local_id] = store_id
        self._failed_workouts.discard(local_id)

    def mark_program_failed(self, local_id: int) -> None:
        if local_id not in self._programs:
            self._failed_programs.add(local_id)

    def mark_workout_failed(self, local_id: int) -> None:
        if local_id not in self._workouts:
            self._failed_workouts.add(local_id)

    def resolve_program(self, local_id: int) -> int | None:
        return self._programs.get(local_id)

    def resolve_workout(self, local_id: int) -> int | None:
        return self._workouts.get(local_id)

    def claims_program(self, local_id: int) -> bool:
        """True if ``local_id`` can only refer to a program row of this payload."""
        return self.positional_programs or local_id in self._failed_programs

    def claims_workout(self, local_id: int) -> bool:
        """True if ``local_id`` can only refer to a workout row of this payload."""
        return self.positional_workouts or local_id in self._failed_workouts

    def __repr__(self) -> str:
        return (
            f"<ReconciliationMap programs={len(self._programs)} workouts={len(self._workouts)} "
            f"failed={len(self._failed_programs) + len(self._failed_workouts)}>"
        )
