import unittest
from unittest import mock
from chip8.errors import UnknownInstructionError
from chip8.machine import Chip8
from chip8.scheduler import Scheduler


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def machine(*words):
    chip = Chip8()
    chip.load_rom(b"".join(w.to_bytes(2, "big") for w in words))
    return chip


class TestStep(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.frames = []
        self.chip = machine(0x1200)     # JP 0x200, loops forever
        self.chip.dt = 5
        self.scheduler = Scheduler(self.chip, on_frame=self.frames.append, clock=self.clock)

    def test_no_tick_before_period(self):
        for _ in range(100):
            self.scheduler.step()
        self.assertEqual(self.chip.dt, 5)
        self.assertEqual(self.frames, [])

    def test_tick_every_sixtieth(self):
        for _ in range(5):
            self.clock.now += 0.02
            self.scheduler.step()
        self.assertEqual(self.chip.dt, 0)
        self.assertEqual(len(self.frames), 5)
        self.assertIs(self.frames[0], self.chip)
        self.clock.now += 0.02
        self.scheduler.step()
        self.assertEqual(self.chip.dt, 0)

    def test_backlog_dropped(self):
        self.clock.now += 1.0
        self.scheduler.step()
        self.assertEqual(self.chip.dt, 4)
        self.clock.now += 0.001
        self.scheduler.step()
        self.assertEqual(self.chip.dt, 4)


class TestInput(unittest.TestCase):
    def test_transitions_reach_keypad_before_cycle(self):
        chip = machine(0xF00A)     # LD V0, K
        scheduler = Scheduler(chip, poll_input=lambda: [(0x5, True)], clock=FakeClock())
        scheduler.step()
        self.assertEqual(chip.v_regs[0], 0x5)
        self.assertEqual(chip.pc, 0x202)

    def test_key_release(self):
        chip = machine(0x1200)
        chip.keypad[0x2] = True
        scheduler = Scheduler(chip, poll_input=lambda: [(0x2, False)], clock=FakeClock())
        scheduler.step()
        self.assertTrue(chip.keypad.untouched())

    def test_wait_keypress_doesnt_stall(self):
        chip = machine(0xF00A)
        scheduler = Scheduler(chip, poll_input=lambda: None, clock=FakeClock())
        for _ in range(10):
            scheduler.step()
        self.assertEqual(chip.pc, 0x200)


class TestRun(unittest.TestCase):
    def test_runs_until_stopped(self):
        chip = machine(0x7001, 0x7001, 0x7001, 0x7001)
        paced = []
        scheduler = Scheduler(chip, clock=FakeClock(), pace=lambda: paced.append(True))
        answers = iter([True, True, True, False])
        scheduler.run(lambda: next(answers))
        self.assertEqual(chip.v_regs[0], 3)
        self.assertEqual(len(paced), 3)

    def test_fatal_error_propagates(self):
        chip = machine(0x0000)
        scheduler = Scheduler(chip, clock=FakeClock(), pace=lambda: None)
        with self.assertRaises(UnknownInstructionError):
            scheduler.run()
        self.assertTrue(chip.halted)

    def test_bad_speed(self):
        with self.assertRaises(ValueError):
            Scheduler(Chip8(), speed=0)

    def test_default_pacing_sleeps(self):
        scheduler = Scheduler(Chip8(), speed=100, clock=FakeClock())
        with mock.patch("chip8.scheduler.time.sleep") as sleep:
            scheduler.pace()
        sleep.assert_called_once()
        self.assertAlmostEqual(sleep.call_args[0][0], 0.01)


if __name__ == "__main__":
    unittest.main()
