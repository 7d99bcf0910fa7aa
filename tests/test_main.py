"""Tests for the command line entry point."""

import pytest
import octavm.__main__ as cli


class FakeWindow:
    """Stands in for the pygame window; runs the machine briefly in-thread."""

    instances = []

    def __init__(self, *args, **kwargs):
        self.keys = set()
        self.frames = []
        FakeWindow.instances.append(self)

    def pressed_keys(self):
        return self.keys

    def draw(self, frame):
        self.frames.append(frame)

    def run(self, machine):
        self.machine = machine
        for _ in range(50):
            try:
                machine.cycle()
            except Exception:
                return
        machine.stop()


@pytest.fixture
def fake_window(monkeypatch):
    import octavm.window
    FakeWindow.instances = []
    monkeypatch.setattr(octavm.window, "PygameInputOutput", FakeWindow)
    return FakeWindow


def test_main_runs_default_rom(fake_window):
    assert cli.main([]) == 0
    machine = fake_window.instances[0].machine
    assert machine.cycles == 50


def test_main_runs_rom_file(fake_window, tmp_path):
    rom = tmp_path / "loop.ch8"
    rom.write_bytes(bytes([0x12, 0x00]))
    assert cli.main([str(rom)]) == 0


def test_main_reports_crash(fake_window, tmp_path):
    rom = tmp_path / "bad.ch8"
    rom.write_bytes(bytes([0xFF, 0xFF]))
    assert cli.main([str(rom)]) == 1
