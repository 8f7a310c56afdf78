from warehouse_rl.utils.rng import SeededRNG


def test_same_seed_gives_same_sequence():
    first = SeededRNG(17)
    second = SeededRNG(17)
    assert [first.random() for _ in range(10)] == [second.random() for _ in range(10)]
    options = ["a", "b", "c", "d"]
    assert [first.choice(options) for _ in range(10)] == [second.choice(options) for _ in range(10)]


def test_instances_do_not_share_state():
    reference = SeededRNG(3)
    expected = [reference.random() for _ in range(5)]

    rng = SeededRNG(3)
    other = SeededRNG(3)
    values = []
    for _ in range(5):
        other.random()
        values.append(rng.random())
    assert values == expected
