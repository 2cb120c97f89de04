"""
Profile the running backend under load: start it with uvicorn, push bursts
of key presses, then poll /api/frame and report how long it takes to answer
and how large the payload grows.

Run from repo root:
    python profile_frame_loop.py
"""

from __future__ import annotations

import json
import os
import statistics
import subprocess
import sys
import time
import urllib.error
import urllib.request
from typing import Dict, List, Optional, Tuple

BASE_URL = "http://127.0.0.1:8000"
FRAME_POLLS = 30

# (name, key presses, gravity radius knob)
SCENARIOS: List[Tuple[str, int, int]] = [
    ("sparse_25_keys", 25, 40),
    ("dense_400_keys", 400, 40),
    ("hovering_400_keys", 400, 0),
]


def _request(path: str, payload: Optional[Dict[str, object]] = None) -> bytes:
    data = None if payload is None else json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        f"{BASE_URL}{path}",
        data=data,
        headers={"Content-Type": "application/json"},
    )
    with urllib.request.urlopen(req, timeout=30) as resp:
        return resp.read()


def start_backend(timeout_sec: float = 20.0) -> subprocess.Popen:
    # Profiling runs never need a hardware controller.
    env = {**os.environ, "GRAVITY_SYNTH_MIDI": "false"}
    proc = subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "gravity_synth.main:app", "--port", "8000"],
        env=env,
    )
    deadline = time.monotonic() + timeout_sec
    while time.monotonic() < deadline:
        if proc.poll() is not None:
            raise RuntimeError(f"Backend exited early with code {proc.returncode}")
        try:
            _request("/api/status")
            return proc
        except urllib.error.URLError:
            time.sleep(0.25)
    proc.terminate()
    raise RuntimeError("Backend did not become ready in time")


def run_scenario(name: str, key_presses: int, gravity_radius: int) -> None:
    _request("/api/reset", {})
    for knob, value in (("g1", 64), ("g2", gravity_radius), ("g3", 60)):
        _request("/api/events", {"type": "knob", "knob": knob, "value": value})

    start = time.perf_counter()
    for idx in range(key_presses):
        _request("/api/events", {"type": "key", "index": idx % 25})
    post_ms = (time.perf_counter() - start) * 1000.0

    latencies: List[float] = []
    sizes: List[int] = []
    points = 0
    for _ in range(FRAME_POLLS):
        start = time.perf_counter()
        body = _request("/api/frame")
        latencies.append((time.perf_counter() - start) * 1000.0)
        sizes.append(len(body))
        points = len(json.loads(body)["points"])
        time.sleep(1 / 30)

    cuts = statistics.quantiles(latencies, n=100)
    p50, p95 = cuts[49], cuts[94]
    print(f"\n{name}: {key_presses} keys, gravity radius knob {gravity_radius}")
    print(f"- post keys: {post_ms:.1f} ms total")
    print(
        f"- get frame: min={min(latencies):.1f} p50={p50:.1f} "
        f"p95={p95:.1f} max={max(latencies):.1f} ms"
    )
    print(f"- payload: avg={statistics.mean(sizes):.0f}B, {points} points at end")


def main() -> None:
    proc = start_backend()
    try:
        for scenario in SCENARIOS:
            run_scenario(*scenario)
    finally:
        proc.terminate()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()


if __name__ == "__main__":
    main()
