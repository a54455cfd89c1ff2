from compressibility_study.cycles import fixed_cycle_measurements, randomized_cycle_measurements
from compressibility_study.models import BALL, BALLOON
from compressibility_study.randomization import SeededRandomSource
from compressibility_study.sessions import resolve_models


def _reps(measurements):
    out = {}
    for m in measurements:
        out.setdefault(m.repetition, []).append(m)
    return out


def test_fixed_cycle_repeats_assigned_order():
    models = resolve_models(BALL, ["S2", "S1", "S3", "S4"])
    ms = fixed_cycle_measurements(models)
    assert len(ms) == 20
    reps = _reps(ms)
    assert sorted(reps) == [1, 2, 3, 4, 5]
    for rep in reps.values():
        assert [m.model_id for m in rep] == ["S2", "S1", "S3", "S4"]
        assert [m.model_order for m in rep] == [1, 2, 3, 4]
    assert ms[0].model_name == "Green"
    assert ms[0].color == "#22C55E"


def test_randomized_cycle_reshuffles_each_repetition():
    models = resolve_models(BALLOON, ["B4", "B2", "B1", "B3"])
    rnd = SeededRandomSource(99)
    ms = randomized_cycle_measurements(models, rnd)
    assert len(ms) == 20
    assert rnd.draws == 5 * 3
    for rep in _reps(ms).values():
        assert sorted(m.model_id for m in rep) == ["B1", "B2", "B3", "B4"]
        assert [m.model_order for m in rep] == [1, 2, 3, 4]


def test_randomized_cycle_is_reproducible_from_seed():
    models = resolve_models(BALL, ["S1", "S2", "S3", "S4"])
    a = randomized_cycle_measurements(models, SeededRandomSource(5))
    b = randomized_cycle_measurements(models, SeededRandomSource(5))
    assert a == b


def test_color_only_on_ball_measurements():
    balls = fixed_cycle_measurements(resolve_models(BALL, ["S1", "S2", "S3", "S4"]))
    balloons = randomized_cycle_measurements(resolve_models(BALLOON, ["B1", "B2", "B3", "B4"]), SeededRandomSource(1))
    assert all(m.color for m in balls)
    assert all(m.color is None for m in balloons)
    assert "color" not in balloons[0].to_dict()
