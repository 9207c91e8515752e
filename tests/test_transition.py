from scheduler.transition import TransitionDetector


def test_only_false_to_true_edge_is_reported():
    detector = TransitionDetector()
    assert detector.observe(True) is True
    assert detector.observe(True) is False
    assert detector.observe(False) is False
    assert detector.observe(False) is False
    assert detector.observe(True) is True


def test_initial_state_can_be_seeded():
    detector = TransitionDetector(initial=True)
    assert detector.observe(True) is False
    assert detector.previous is True


def test_truthy_values_are_normalised():
    detector = TransitionDetector()
    assert detector.observe(1) is True
    assert detector.previous is True
