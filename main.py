"""
GlideType - Swipe-Gesture Keyboard Recognition

Diagnostic entry point: recognise a typed key sequence, a synthetic swipe
over a word, or a recorded pointer trace.
"""
import argparse
import sys
from pathlib import Path


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="GlideType - Swipe-Gesture Keyboard Recognition",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: config.yaml)",
    )

    parser.add_argument(
        "--layout",
        default=None,
        help="Keyboard layout name (overrides config)",
    )

    parser.add_argument(
        "--strategy",
        choices=["keys", "template"],
        default=None,
        help="Recognition strategy (overrides config)",
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--keys",
        metavar="TEXT",
        help="Rank words for a key sequence, e.g. 'helo'",
    )
    source.add_argument(
        "--word",
        metavar="WORD",
        help="Swipe straight through the keys of WORD and rank the result",
    )
    source.add_argument(
        "--trace",
        type=Path,
        metavar="FILE",
        help="Replay a JSON pointer trace",
    )

    parser.add_argument(
        "--threaded",
        action="store_true",
        help="Run swipes through the Qt worker in a background thread",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (per-call recognition diagnostics)",
    )

    return parser.parse_args(argv)


def print_candidates(candidates, confidence=None):
    """Print a ranked candidate list."""
    if not candidates:
        print("  (no candidates)")
        return
    for i, c in enumerate(candidates, 1):
        print(f"  {i}. {c.word:<16} {c.score:8.3f}")
    if confidence is not None:
        print(f"  Confidence: {confidence.name}")


def print_result(result):
    """Print a tap or candidate response from the pipeline."""
    from src.gestures import TapResult

    if isinstance(result, TapResult):
        print(f"Tap: {result.key_id}")
        return
    swipe = result.swipe
    print(f"Swipe #{result.sequence}: {len(swipe.path)} points, "
          f"{' -> '.join(swipe.key_sequence) or '(no keys)'} in {swipe.duration_ms:.0f}ms")
    print_candidates(result.candidates, result.confidence)


def run_keys(engine, text):
    """Rank words for a typed key sequence."""
    from src.prediction import get_confidence

    candidates = engine.generate_candidates(text.lower())
    print(f"Keys: {text}")
    print_candidates(candidates, get_confidence(candidates))
    return 0


def run_events(pipeline, events):
    """Replay pointer events through the pipeline synchronously."""
    from src.gestures.trace import replay

    if not events:
        print("ERROR: No pointer events to replay")
        return 1
    for result in replay(pipeline, events):
        print_result(result)
    return 0


def run_threaded(layout, dictionary, config, events):
    """Replay pointer events through the Qt worker living in a QThread."""
    from PyQt5.QtCore import QCoreApplication, QThread, QTimer, Qt
    from src.gestures import RecognitionWorker, ResponseGate

    if not events:
        print("ERROR: No pointer events to replay")
        return 1

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    gate = ResponseGate()
    expected = [sum(1 for e in events if e.kind == "up")]

    thread = QThread()
    worker = RecognitionWorker(layout, dictionary, config)
    worker.moveToThread(thread)

    def handle_result(result):
        if hasattr(result, "sequence") and not gate.accept(result):
            print(f"Dropped stale response #{result.sequence}")
        else:
            print_result(result)
        expected[0] -= 1
        if expected[0] <= 0:
            app.quit()

    # Signals are queued back to the main thread
    thread.started.connect(worker.start_process)
    worker.gesture_started.connect(gate.issue, Qt.QueuedConnection)
    worker.tap_detected.connect(handle_result, Qt.QueuedConnection)
    worker.candidates_ready.connect(handle_result, Qt.QueuedConnection)
    worker.error.connect(lambda msg: print(f"WORKER ERROR: {msg}"), Qt.QueuedConnection)

    # started is emitted in the new thread, so the replay runs there
    thread.started.connect(lambda: worker.replay_events(events))
    thread.start()
    # Give up if the worker never answers
    QTimer.singleShot(5000, app.quit)

    # The timer lives in the worker thread, so it must be stopped there
    worker.stop_requested.connect(worker.stop_process, Qt.BlockingQueuedConnection)

    try:
        result = app.exec_()
    finally:
        if thread.isRunning():
            worker.stop_requested.emit()
        thread.quit()
        thread.wait(2000)
    return result


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    from src.config import load_config
    from src.logging_config import setup_logging

    config = load_config(args.config)

    # Apply CLI overrides
    if args.layout:
        config.keyboard.layout = args.layout
    if args.strategy:
        config.prediction.strategy = args.strategy
    if args.debug:
        config.logging.level = "DEBUG"

    setup_logging(config.logging.level, config.logging.file)

    from src.gestures import RecognitionPipeline
    from src.gestures.trace import load_trace, synthesize_swipe
    from src.resources import ResourceLoader

    loader = ResourceLoader(data_config=config.data)
    layout = loader.load_layout(config.keyboard.layout)
    dictionary = loader.load_dictionary(config.prediction)

    print(f"GlideType starting...")
    print(f"  Layout: {layout.name} ({len(layout)} keys)")
    print(f"  Dictionary: {len(dictionary)} words")
    print(f"  Strategy: {config.prediction.strategy}")
    print()

    pipeline = RecognitionPipeline(layout, dictionary, config)

    if args.keys is not None:
        return run_keys(pipeline.engine, args.keys)

    if args.word is not None:
        events = synthesize_swipe(layout, args.word.lower())
        if not events:
            print(f"ERROR: '{args.word}' has letters missing from layout '{layout.name}'")
            return 1
    else:
        events = load_trace(args.trace)

    if args.threaded:
        return run_threaded(layout, dictionary, config, events)
    return run_events(pipeline, events)


if __name__ == "__main__":
    sys.exit(main())
