import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Annotated, Dict, List, Literal, Optional, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from gravity_synth.audio import NoteQueue
from gravity_synth.clock import AsyncioScheduler
from gravity_synth.constants import KEY_COUNT, RAW_MAX, RAW_MIN
from gravity_synth.controller import (
    ButtonKind,
    ButtonPressed,
    KeyPressed,
    KnobChanged,
    MidiInput,
    decode_message,
)
from gravity_synth.instrument import Instrument
from gravity_synth.log import setup_default_logging
from gravity_synth.settings import Settings

logger = logging.getLogger(__name__)

KnobId = Literal["g1", "g2", "g3", "g4", "a1", "a2", "a3", "a4"]


class KeyEvent(BaseModel):
    type: Literal["key"]
    index: int = Field(ge=0, le=KEY_COUNT - 1)
    velocity: int = Field(default=127, ge=1, le=127)


class KnobEvent(BaseModel):
    type: Literal["knob"]
    knob: KnobId
    value: int = Field(ge=RAW_MIN, le=RAW_MAX)


class ButtonEvent(BaseModel):
    type: Literal["button"]
    button: Literal["record", "reset"]


class MidiRequest(BaseModel):
    data: List[Annotated[int, Field(ge=0, le=255)]] = Field(min_length=1)


class EventResponse(BaseModel):
    handled: bool
    mode: Literal["idle", "recording", "playing"]


class TrailPoint(BaseModel):
    x: float
    y: float
    alpha: float


class PointModel(BaseModel):
    keyIndex: int
    state: Literal["falling", "orbiting"]
    x: float
    y: float
    angle: float
    radius: float
    alpha: float
    color: List[int]
    diameter: float
    playbackOffset: Optional[float] = None
    trail: List[TrailPoint]


class Chrome(BaseModel):
    strokeOn: str
    strokeOff: str
    glow: float


class FrameResponse(BaseModel):
    t: float
    frame: int
    canvasSize: float
    mode: Literal["idle", "recording", "playing"]
    chrome: Chrome
    knobs: Dict[str, float]
    parameters: Dict[str, float]
    points: List[PointModel]


class NoteEvent(BaseModel):
    t: float
    type: Literal["note_on"]
    pitch: str
    midi: int
    volume: float
    sustain: float
    release: float


class StatusResponse(BaseModel):
    midiConnected: bool
    midiPort: Optional[str] = None
    mode: Literal["idle", "recording", "playing"]
    recordedEvents: int
    activePoints: int


async def frame_loop(instrument: Instrument, fps: float, midi: MidiInput) -> None:
    """
    Poll controller input and advance the simulation, once per frame, for
    as long as the app runs.
    """
    interval = 1.0 / fps
    while True:
        for event in midi.poll():
            instrument.handle(event)
        instrument.advance_frame()
        await asyncio.sleep(interval)


def _to_controller_event(event: Union[KeyEvent, KnobEvent, ButtonEvent]):
    if isinstance(event, KeyEvent):
        return KeyPressed(index=event.index, velocity=event.velocity)
    if isinstance(event, KnobEvent):
        return KnobChanged(knob_id=event.knob, raw_value=event.value)
    return ButtonPressed(ButtonKind(event.button))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_default_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = AsyncioScheduler()
        notes = NoteQueue(scheduler.now, maxlen=settings.note_queue_size)
        instrument = Instrument(
            scheduler,
            notes,
            canvas_size=settings.canvas_size,
            min_playback_delay_ms=settings.min_playback_delay_ms,
        )
        midi = MidiInput(settings.midi_port)
        if settings.midi_enabled:
            midi.open()
        else:
            logger.info("MIDI input disabled, accepting HTTP events only")

        app.state.instrument = instrument
        app.state.notes = notes
        app.state.midi = midi
        task = asyncio.create_task(frame_loop(instrument, settings.fps, midi))
        try:
            yield
        finally:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
            instrument.recorder.stop()
            midi.close()

    app = FastAPI(lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Handlers that touch the instrument are async so they run on the event
    # loop thread, alongside the frame loop and playback timers.

    @app.post("/api/events", response_model=EventResponse)
    async def post_event(event: Union[KeyEvent, KnobEvent, ButtonEvent], request: Request):
        instrument: Instrument = request.app.state.instrument
        instrument.handle(_to_controller_event(event))
        return {"handled": True, "mode": instrument.recorder.mode.value}

    @app.post("/api/midi", response_model=EventResponse)
    async def post_midi(req: MidiRequest, request: Request):
        """Raw controller bytes; unrecognized messages are accepted and ignored."""
        instrument: Instrument = request.app.state.instrument
        event = decode_message(req.data)
        if event is not None:
            instrument.handle(event)
        return {"handled": event is not None, "mode": instrument.recorder.mode.value}

    @app.get("/api/frame", response_model=FrameResponse)
    async def get_frame(request: Request):
        return request.app.state.instrument.frame()

    @app.get("/api/notes", response_model=List[NoteEvent])
    async def get_notes(request: Request):
        return request.app.state.notes.drain()

    @app.post("/api/reset", response_model=EventResponse)
    async def post_reset(request: Request):
        instrument: Instrument = request.app.state.instrument
        instrument.reset()
        return {"handled": True, "mode": instrument.recorder.mode.value}

    @app.get("/api/status", response_model=StatusResponse)
    async def get_status(request: Request):
        instrument: Instrument = request.app.state.instrument
        midi: MidiInput = request.app.state.midi
        return {
            "midiConnected": midi.connected,
            "midiPort": midi.port_name,
            "mode": instrument.recorder.mode.value,
            "recordedEvents": len(instrument.recorder.events),
            "activePoints": len(instrument.simulation.points),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
