import threading

from transformkit import TransformationTemplate, TransformationUtility


class SharedTemplate(TransformationTemplate):
    def get_extension_class(self):
        return "concurrency"

    def get_description(self):
        return "Template filled from several threads"


class Touch(TransformationUtility):
    def get_description(self):
        return "Touch"


def test_concurrent_registration_assigns_distinct_contiguous_orders():
    template = SharedTemplate()
    thread_count = 48
    utilities = [Touch().relative(f"f{idx}.txt") for idx in range(thread_count)]
    barrier = threading.Barrier(thread_count)
    errors: list[BaseException] = []

    def _register(utility: Touch) -> None:
        try:
            barrier.wait()
            template.add(utility)
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=_register, args=(u,)) for u in utilities]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    orders = sorted(u.order for u in utilities)
    assert orders == list(range(1, thread_count + 1))

    registered = template.utilities()
    assert len(registered) == thread_count
    assert [u.order for u in registered] == list(range(1, thread_count + 1))
    assert len({u.name for u in registered}) == thread_count


def test_concurrent_claims_of_one_utility_leave_a_single_owner():
    templates = [SharedTemplate() for _ in range(8)]
    utility = Touch().relative("shared.txt")
    barrier = threading.Barrier(len(templates))
    outcomes: list[str] = []
    lock = threading.Lock()

    def _register(template: SharedTemplate) -> None:
        barrier.wait()
        try:
            template.add(utility)
            result = "ok"
        except Exception as exc:  # noqa: BLE001
            result = type(exc).__name__
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=_register, args=(t,)) for t in templates]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("ok") == 1
    assert set(outcomes) <= {"ok", "AlreadyOwnedError"}
    assert utility.parent in templates
    assert utility.order == 1
    for template in templates:
        expected = (utility,) if template is utility.parent else ()
        assert template.utilities() == expected


def test_reader_snapshots_are_prefixes_of_the_final_sequence():
    template = SharedTemplate()
    total = 200
    snapshots: list[tuple] = []
    done = threading.Event()

    def _reader() -> None:
        while not done.is_set():
            snapshots.append(template.utilities())

    reader = threading.Thread(target=_reader)
    reader.start()
    try:
        for idx in range(total):
            template.add(Touch().relative(f"f{idx}.txt"))
    finally:
        done.set()
        reader.join()

    final = template.utilities()
    assert len(final) == total
    for snapshot in snapshots:
        assert snapshot == final[: len(snapshot)]


class GatedTouch(Touch):
    """Pauses inside `set_parent` until the test lets it finish."""

    def __init__(self):
        super().__init__()
        self.claiming = threading.Event()
        self.release = threading.Event()

    def set_parent(self, parent, order):
        self.claiming.set()
        assert self.release.wait(timeout=5)
        return super().set_parent(parent, order)


def test_reader_never_sees_a_utility_before_its_order_is_set():
    template = SharedTemplate()
    utility = GatedTouch().relative("slow.txt")
    orders_seen: list[list] = []
    reader_started = threading.Event()

    def _read() -> None:
        reader_started.set()
        orders_seen.append([u.order for u in template.utilities()])

    writer = threading.Thread(target=template.add, args=(utility,))
    writer.start()
    assert utility.claiming.wait(timeout=5)

    reader = threading.Thread(target=_read)
    reader.start()
    assert reader_started.wait(timeout=5)
    reader.join(timeout=0.1)
    utility.release.set()
    writer.join()
    reader.join()

    assert orders_seen == [[1]]
    assert template.utilities() == (utility,)


class CheckRacingTouch(Touch):
    """Holds two registrations together right after both read `parent`."""

    def __init__(self, parties: int):
        super().__init__()
        self._barrier = threading.Barrier(parties)
        self._parent_reads = 0

    @property
    def parent(self):
        value = super().parent
        if value is None and self._parent_reads < self._barrier.parties:
            self._parent_reads += 1
            try:
                self._barrier.wait(timeout=0.5)
            except threading.BrokenBarrierError:
                pass
        return value


def test_losing_template_keeps_nothing_when_two_templates_race_for_one_utility():
    winner_candidates = [SharedTemplate(), SharedTemplate()]
    utility = CheckRacingTouch(parties=2).relative("shared.txt")
    errors: list[BaseException] = []

    def _register(template: SharedTemplate) -> None:
        try:
            template.add(utility)
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=_register, args=(t,)) for t in winner_candidates]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert [type(exc).__name__ for exc in errors] == ["AlreadyOwnedError"]
    owner = utility.parent
    (loser,) = [t for t in winner_candidates if t is not owner]
    assert owner.utilities() == (utility,)
    assert loser.utilities() == ()
