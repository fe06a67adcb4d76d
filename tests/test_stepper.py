"""
Tests for the Playback Controller.
"""

import pytest

from algorithms import dijkstra
from algorithms.step import EMPTY_STEP, StepKind
from engine import OutOfRangeError, Stepper, StepperState


@pytest.fixture
def stepper(dijkstra_graph):
    return Stepper(dijkstra.run(dijkstra_graph, 0))


class TestCursor:

    def test_starts_before_first_step(self, stepper):
        assert stepper.position == -1
        assert stepper.current() is EMPTY_STEP
        assert stepper.current().kind is StepKind.EMPTY
        assert stepper.state is StepperState.IDLE

    def test_next_walks_the_trace(self, stepper):
        assert stepper.next()
        assert stepper.position == 0
        assert stepper.current().kind is StepKind.INIT
        assert stepper.state is StepperState.PAUSED

    def test_next_at_end_is_noop(self, stepper):
        stepper.jump_to_end()
        assert stepper.at_end
        assert not stepper.next()
        assert stepper.position == stepper.length - 1
        assert stepper.state is StepperState.FINISHED

    def test_previous_at_start_is_noop(self, stepper):
        assert not stepper.previous()
        assert stepper.position == -1
        stepper.next()
        assert not stepper.previous()
        assert stepper.position == 0

    def test_previous_rewinds(self, stepper):
        stepper.seek(5)
        assert stepper.previous()
        assert stepper.current().index == 4

    def test_seek_in_range(self, stepper):
        step = stepper.seek(9)
        assert step is stepper.current()
        assert step.heap[0].id == 2

    @pytest.mark.parametrize("index", [-1, 17, 99])
    def test_seek_out_of_range(self, stepper, index):
        stepper.seek(3)
        with pytest.raises(OutOfRangeError) as err:
            stepper.seek(index)
        assert err.value.length == 17
        assert stepper.position == 3

    def test_reset_keeps_trace(self, stepper):
        trace = stepper.trace
        stepper.seek(10)
        stepper.reset()
        assert stepper.position == -1
        assert stepper.current() is EMPTY_STEP
        assert stepper.trace is trace
        assert stepper.state is StepperState.IDLE

    def test_walk_forward_then_back_returns_same_steps(self, stepper):
        forward = []
        while stepper.next():
            forward.append(stepper.current())
        backward = [stepper.current()]
        while stepper.previous():
            backward.append(stepper.current())
        assert backward[::-1] == forward

    def test_final_step_matches_result(self, stepper):
        stepper.jump_to_end()
        assert dict(stepper.current().distances) == stepper.trace.result().distances

    def test_navigation_never_mutates_trace(self, stepper):
        before = stepper.trace.to_json()
        stepper.seek(12)
        stepper.previous()
        stepper.forward()
        stepper.reset()
        assert stepper.trace.to_json() == before


class TestForward:

    def test_stops_on_visit_or_improvement(self, stepper):
        positions = []
        while stepper.forward():
            positions.append(stepper.position)
        # VISIT A, A→B, A→C, VISIT B, B→C, B→D, VISIT C, C→D, VISIT D, DONE
        assert positions == [2, 3, 4, 6, 7, 8, 10, 11, 15, 16]


class TestAutoplay:

    def test_tick_respects_speed(self, stepper):
        stepper.set_speed("slow")
        stepper.play(now=0.0)
        assert not stepper.tick(now=0.5)
        assert stepper.tick(now=1.0)
        assert stepper.position == 0
        assert stepper.is_playing

    def test_tick_does_nothing_when_paused(self, stepper):
        stepper.play(now=0.0)
        stepper.pause()
        assert not stepper.tick(now=100.0)
        assert stepper.position == -1

    def test_playing_to_the_end_finishes(self, stepper):
        stepper.set_speed_value(0.1)
        stepper.play(now=0.0)
        now = 0.0
        while stepper.is_playing:
            now += 0.1
            stepper.tick(now=now)
        assert stepper.state is StepperState.FINISHED
        assert stepper.at_end

    def test_play_is_ignored_once_finished(self, stepper):
        stepper.jump_to_end()
        stepper.play(now=0.0)
        assert stepper.state is StepperState.FINISHED

    def test_toggle_play(self, stepper):
        stepper.toggle_play(now=0.0)
        assert stepper.is_playing
        stepper.toggle_play()
        assert stepper.state is StepperState.PAUSED

    def test_speed_value_has_floor(self, stepper):
        stepper.set_speed_value(0.0)
        assert stepper.speed == 0.02


def test_on_step_callback(dijkstra_graph):
    seen = []
    s = Stepper(dijkstra.run(dijkstra_graph, 0), on_step=seen.append)
    s.next()
    s.seek(4)
    s.reset()
    assert [step.index for step in seen] == [0, 4]
