import random
import unittest

import numpy as np

from voronoi_canvas.colors import HslColor, to_rgb
from voronoi_canvas.engine import (
    GenerationRun,
    ManualFrameScheduler,
    TimerFrameScheduler,
    fill_animated,
    fill_from_labels,
    fill_instant,
)
from voronoi_canvas.nearest import nearest_seed_field
from voronoi_canvas.raster import Raster
from voronoi_canvas.seeds import Seed, random_seeds


class _NoCancelScheduler(ManualFrameScheduler):
    """Host whose cancel primitive arrives too late to drop the queued frame."""

    def cancel_frame(self, handle: int) -> None:
        return None


def _two_seeds():
    return [Seed(5, 10, HslColor(0)), Seed(25, 30, HslColor(200))]


class InstantFillTests(unittest.TestCase):
    def test_every_pixel_takes_nearest_seed_color(self) -> None:
        seeds = _two_seeds()
        raster = Raster(30, 40)
        written = fill_instant(raster, seeds)
        self.assertEqual(written, 30 * 40)
        self.assertTrue((raster.rgba[:, :, 3] == 255).all())
        self.assertEqual(raster.pixel(0, 0), to_rgb(seeds[0].color) + (255,))
        self.assertEqual(raster.pixel(29, 39), to_rgb(seeds[1].color) + (255,))

    def test_no_seeds_leaves_raster_unset(self) -> None:
        raster = Raster(8, 6)
        self.assertEqual(fill_instant(raster, []), 0)
        self.assertFalse(raster.rgba.any())

    def test_non_positive_dimensions_are_no_ops(self) -> None:
        for width, height in ((0, 5), (-3, 4), (4, 0)):
            raster = Raster(width, height)
            self.assertTrue(raster.is_empty)
            self.assertEqual(fill_instant(raster, _two_seeds()), 0)

    def test_fill_from_precomputed_labels_matches_instant(self) -> None:
        seeds = _two_seeds()
        expected = Raster(30, 40)
        fill_instant(expected, seeds)
        labels, _ = nearest_seed_field(30, 40, seeds)
        raster = Raster(30, 40)
        self.assertEqual(fill_from_labels(raster, seeds, labels), 30 * 40)
        self.assertTrue(np.array_equal(raster.rgba, expected.rgba))


class AnimatedFillTests(unittest.TestCase):
    def _start(self, raster, seeds, speed, scheduler=None):
        scheduler = scheduler or ManualFrameScheduler()
        frames = []
        completed = []
        cancel = fill_animated(
            raster,
            seeds,
            speed,
            lambda run: frames.append(run.radius),
            lambda run: completed.append(run.frame_count),
            scheduler,
        )
        return scheduler, cancel, frames, completed

    def test_completed_run_matches_instant_fill(self) -> None:
        seeds = random_seeds(9, 37, 29, rng=random.Random(3))
        expected = Raster(37, 29)
        fill_instant(expected, seeds)

        raster = Raster(37, 29)
        scheduler, _cancel, _frames, completed = self._start(raster, seeds, 4)
        scheduler.run_until_idle()
        self.assertEqual(len(completed), 1)
        self.assertTrue(np.array_equal(raster.rgba, expected.rgba))

    def test_radius_advances_by_speed_until_diagonal(self) -> None:
        raster = Raster(30, 40)  # diagonal 50
        scheduler, _cancel, frames, completed = self._start(raster, _two_seeds(), 7)
        scheduler.run_until_idle()
        self.assertEqual(frames, [7.0, 14.0, 21.0, 28.0, 35.0, 42.0, 49.0, 56.0])
        self.assertEqual(completed, [8])

    def test_radius_equal_to_diagonal_terminates(self) -> None:
        raster = Raster(30, 40)
        scheduler, _cancel, frames, completed = self._start(raster, _two_seeds(), 25)
        scheduler.run_until_idle()
        self.assertEqual(frames, [25.0, 50.0])
        self.assertEqual(completed, [2])

    def test_frames_resolve_pixels_within_radius(self) -> None:
        seeds = _two_seeds()
        _labels, distances = nearest_seed_field(30, 40, seeds)
        run = GenerationRun(Raster(30, 40), seeds, 6)
        previous = run.raster.rgba.copy()
        previous_resolved = run.resolved.copy()
        while not run.done:
            run.step()
            if not run.done:
                self.assertTrue(np.array_equal(run.resolved, distances <= run.radius))
            # resolved pixels never flip back or change color
            self.assertTrue((run.resolved | ~previous_resolved).all())
            self.assertTrue(np.array_equal(run.raster.rgba[previous_resolved], previous[previous_resolved]))
            previous = run.raster.rgba.copy()
            previous_resolved = run.resolved.copy()
        self.assertTrue(run.resolved.all())

    def test_cancel_stops_frames_and_completion(self) -> None:
        raster = Raster(30, 40)
        scheduler, cancel, frames, completed = self._start(raster, _two_seeds(), 5)
        scheduler.run_next()
        scheduler.run_next()
        cancel()
        self.assertTrue(cancel.cancelled)
        self.assertEqual(scheduler.pending, 0)
        self.assertEqual(scheduler.run_until_idle(), 0)
        self.assertEqual(len(frames), 2)
        self.assertEqual(completed, [])
        cancel()
        self.assertEqual(len(frames), 2)

    def test_cancel_inside_frame_callback(self) -> None:
        scheduler = ManualFrameScheduler()
        frames = []
        completed = []
        handle = {}

        def on_frame(run):
            frames.append(run.frame_count)
            if run.frame_count == 3:
                handle["cancel"]()

        handle["cancel"] = fill_animated(
            Raster(30, 40), _two_seeds(), 5, on_frame, lambda run: completed.append(run), scheduler
        )
        scheduler.run_until_idle()
        self.assertEqual(frames, [1, 2, 3])
        self.assertEqual(completed, [])

    def test_cancel_after_completion_is_a_no_op(self) -> None:
        scheduler, cancel, _frames, completed = self._start(Raster(30, 40), _two_seeds(), 25)
        scheduler.run_until_idle()
        self.assertEqual(completed, [2])
        cancel()
        self.assertFalse(cancel.cancelled)
        self.assertFalse(cancel.run.cancelled)

    def test_cancel_on_final_frame_suppresses_completion(self) -> None:
        scheduler = ManualFrameScheduler()
        completed = []
        handle = {}

        def on_frame(run):
            if run.done:
                handle["cancel"]()

        handle["cancel"] = fill_animated(Raster(30, 40), _two_seeds(), 25, on_frame, completed.append, scheduler)
        scheduler.run_until_idle()
        self.assertTrue(handle["cancel"].cancelled)
        self.assertEqual(completed, [])

    def test_already_scheduled_frame_writes_but_stays_silent(self) -> None:
        scheduler = _NoCancelScheduler()
        raster = Raster(30, 40)
        _scheduler, cancel, frames, completed = self._start(raster, _two_seeds(), 5, scheduler)
        scheduler.run_next()
        resolved_before = cancel.run.resolved_count
        cancel()
        self.assertEqual(scheduler.pending, 1)
        scheduler.run_until_idle()
        self.assertEqual(cancel.run.frame_count, 2)
        self.assertGreater(cancel.run.resolved_count, resolved_before)
        self.assertEqual(len(frames), 1)
        self.assertEqual(completed, [])
        self.assertEqual(scheduler.pending, 0)

    def test_empty_seed_set_completes_on_first_frame(self) -> None:
        raster = Raster(30, 40)
        scheduler, cancel, frames, completed = self._start(raster, [], 5)
        self.assertEqual(scheduler.run_until_idle(), 1)
        self.assertEqual(completed, [1])
        self.assertEqual(cancel.run.resolved_count, 0)
        self.assertFalse(raster.rgba.any())

    def test_empty_raster_completes_on_first_frame(self) -> None:
        scheduler, _cancel, _frames, completed = self._start(Raster(0, 10), _two_seeds(), 5)
        scheduler.run_until_idle()
        self.assertEqual(completed, [1])

    def test_non_positive_speed_rejected(self) -> None:
        for speed in (0, -1, float("nan")):
            with self.assertRaises(ValueError):
                fill_animated(Raster(4, 4), _two_seeds(), speed, None, None, ManualFrameScheduler())

    def test_seed_outside_raster_still_fills_everything(self) -> None:
        seeds = [Seed(-500, -500, HslColor(90))]
        expected = Raster(10, 10)
        fill_instant(expected, seeds)
        run = GenerationRun(Raster(10, 10), seeds, 5)
        run.run_to_completion()
        self.assertEqual(run.frame_count, 3)
        self.assertTrue(run.resolved.all())
        self.assertTrue(np.array_equal(run.raster.rgba, expected.rgba))

    def test_seed_sequence_is_snapshotted(self) -> None:
        seeds = _two_seeds()
        run = GenerationRun(Raster(10, 10), seeds, 5)
        seeds.append(Seed(9, 9, HslColor(10)))
        self.assertEqual(len(run.seeds), 2)


class _FakeTimer:
    def __init__(self) -> None:
        self.callbacks = []
        self.started = False
        self.stopped = False
        self.single_shot = False

    def add_callback(self, func) -> None:
        self.callbacks.append(func)

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def fire(self) -> None:
        for func in self.callbacks:
            func()


class _FakeCanvas:
    def __init__(self) -> None:
        self.timers = []

    def new_timer(self, interval: int = 0) -> _FakeTimer:
        timer = _FakeTimer()
        self.timers.append(timer)
        return timer


class TimerSchedulerTests(unittest.TestCase):
    def test_frames_ride_single_shot_timers(self) -> None:
        canvas = _FakeCanvas()
        scheduler = TimerFrameScheduler(canvas, interval_ms=5)
        completed = []
        cancel = fill_animated(Raster(30, 40), _two_seeds(), 30, None, completed.append, scheduler)
        self.assertEqual(len(canvas.timers), 1)
        self.assertTrue(canvas.timers[0].single_shot and canvas.timers[0].started)
        canvas.timers[0].fire()
        self.assertEqual(len(canvas.timers), 2)
        canvas.timers[1].fire()
        self.assertEqual(completed, [cancel.run])

    def test_cancel_stops_pending_timer(self) -> None:
        canvas = _FakeCanvas()
        scheduler = TimerFrameScheduler(canvas)
        cancel = fill_animated(Raster(30, 40), _two_seeds(), 5, None, None, scheduler)
        cancel()
        self.assertTrue(canvas.timers[0].stopped)


if __name__ == "__main__":
    unittest.main()
