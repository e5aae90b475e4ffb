import time


class EntityIdService:
    """
    Issues entity ids as millisecond timestamps in string form.

    Ids are strictly increasing within the process: a second request in the
    same millisecond gets the next millisecond instead of a duplicate.
    """

    def __init__(self):
        self._last = 0

    def generate_id(self) -> str:
        now_ms = int(time.time() * 1000)
        self._last = max(now_ms, self._last + 1)
        return str(self._last)


entity_id_service = EntityIdService()
