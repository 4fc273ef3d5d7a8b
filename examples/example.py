"""Example usage of StationTracker."""

import logging
import sys
from pathlib import Path

# Add src to path so we can import tubespotter
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tubespotter import LoadError, StationTracker

DATA_DIR = Path(__file__).parent.parent / "data"

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def load_tracker() -> StationTracker:
    """Load station data, retrying on request until it succeeds."""
    tracker = StationTracker()
    while True:
        try:
            tracker.load_catalog_from_files(DATA_DIR / "stations.json", DATA_DIR / "station_lines.json")
            return tracker
        except LoadError as e:
            print(f"Content unavailable: {e}")
            if input("Retry? [y/N] ").strip().lower() != "y":
                sys.exit(1)


def print_markers(tracker: StationTracker, names) -> None:
    for name in names:
        marker = tracker.get_marker(name)
        print(f"\n{marker.station.name.upper()}")
        if not marker.lines:
            print("  No line information")
        for line, status, description in marker.lines:
            state = status.value if status else "no status"
            detail = f" ({description})" if description else ""
            print(f"  {line.display_name:<20} {line.mode.value:<14} {state}{detail}")


def interactive_mode():
    """
    Read "latitude,longitude" fixes and show the markers that change.
    """
    print("TubeSpotter - Interactive Mode")
    print("Enter a location as 'latitude,longitude' (e.g. 51.515,-0.1415)")
    print("(Type 'quit' to exit)\n")

    tracker = load_tracker()

    while True:
        try:
            user_input = input("Location (or 'quit'): ").strip()

            if user_input.lower() in ["quit", "q", "exit"]:
                print("Goodbye!")
                break

            if not user_input:
                continue

            try:
                latitude, longitude = (float(part) for part in user_input.split(","))
            except ValueError:
                print("Expected 'latitude,longitude'")
                continue

            update = tracker.update_location(latitude, longitude)
            if not update.changed:
                print("Moved less than 30m, markers unchanged")
                continue

            for name in update.removed:
                print(f"Remove marker: {name}")
            print_markers(tracker, update.added)
            print(f"\n{len(update.nearby)} stations nearby\n")

        except KeyboardInterrupt:
            print("\n\nGoodbye!")
            break


if __name__ == "__main__":
    if len(sys.argv) == 3:
        tracker = load_tracker()
        update = tracker.update_location(float(sys.argv[1]), float(sys.argv[2]))
        print_markers(tracker, update.added)
    else:
        interactive_mode()
