#!/usr/bin/env python3
"""Terminal-based CLI for LearnX."""

import argparse
import mimetypes
import sys
from pathlib import Path

from learnx.core.config import get_settings, setup_logging
from learnx.core.errors import ConfigurationError, GalleryError
from learnx.core.gallery import InMemoryGalleryStore, create_gallery_backend
from learnx.frontend.client import FunctionsClient
from learnx.frontend.controllers import (
    ActionController,
    ContentWriterController,
    GalleryController,
    ImageAnalysisController,
    ImageGeneratorController,
    SlideGeneratorController,
    SpeechSynthesisController,
    TranscriptionController,
    format_created_at,
)


def print_header() -> None:
    """Print the CLI header."""
    print("\n" + "=" * 60)
    print("  🎓 LearnX CLI")
    print("  Learn smarter with AI")
    print("=" * 60)


def print_help() -> None:
    """Print available commands."""
    print("""
Available Commands:
  image       - Generate an image and save it to the gallery
  analyze     - Explain an image file
  write       - Generate written content about a topic
  slides      - Turn text into a slide outline
  transcribe  - Transcribe an audio file
  speak       - Synthesize text to an MP3 file
  gallery     - List saved images
  delete      - Delete a saved image
  help        - Show this help message
  exit        - Exit the application
  quit        - Exit the application
""")


def print_notice(controller: ActionController | GalleryController) -> None:
    notice = controller.pop_notice()
    if notice is None:
        return
    prefix = "Error" if notice.destructive else "OK"
    print(f"\n[{prefix}] {notice.title}")
    if notice.description:
        print(f"  {notice.description}")


def read_file(prompt: str) -> tuple[bytes | None, str]:
    """Prompt for a file path and return its bytes and guessed mime type."""
    raw = input(prompt).strip()
    if not raw:
        return None, ""
    path = Path(raw).expanduser()
    if not path.is_file():
        print(f"File not found: {path}")
        return None, ""
    mime_type, _ = mimetypes.guess_type(path.name)
    return path.read_bytes(), mime_type or "application/octet-stream"


def read_multiline(prompt: str) -> str:
    """Read lines until an empty line."""
    print(prompt + " (finish with an empty line):")
    lines = []
    while True:
        line = input("> ")
        if not line:
            break
        lines.append(line)
    return "\n".join(lines)


class LearnXShell:
    """Interactive loop over the page controllers."""

    def __init__(self, client: FunctionsClient, repository, feed):
        self.image = ImageGeneratorController(client, repository)
        self.analysis = ImageAnalysisController(client)
        self.writer = ContentWriterController(client)
        self.slides = SlideGeneratorController(client)
        self.transcription = TranscriptionController(client)
        self.speech = SpeechSynthesisController()
        self.gallery = GalleryController(repository, feed)

    def generate_image(self) -> None:
        prompt = input("\nDescribe the image you want to generate:\n> ").strip()
        print("\nGenerating image...")
        outcome = self.image.generate(prompt)
        print_notice(self.image)

        if outcome:
            preview = outcome.image_url
            if len(preview) > 80:
                preview = preview[:77] + "..."
            print(f"Image: {preview}")
            print(f"Message: {outcome.message}")
            if not outcome.saved:
                print(f"Warning: not saved to gallery ({outcome.save_error})")

    def analyze_image(self) -> None:
        data, mime_type = read_file("\nPath to image: ")
        print("\nAnalyzing image...")
        result = self.analysis.analyze(data, mime_type)
        print_notice(self.analysis)
        if result:
            print("\n" + result)

    def write_content(self) -> None:
        prompt = input("\nEnter a topic:\n> ").strip()
        print("\nWriting...")
        result = self.writer.write(prompt)
        print_notice(self.writer)
        if result:
            print("\n" + result)

    def generate_slides(self) -> None:
        content = read_multiline("\nPaste the content for your slides")
        print("\nPlanning slides...")
        result = self.slides.generate(content)
        print_notice(self.slides)
        if result:
            print("\n" + result)

    def transcribe_audio(self) -> None:
        data, mime_type = read_file("\nPath to audio file: ")
        print("\nTranscribing...")
        result = self.transcription.transcribe(data, mime_type)
        print_notice(self.transcription)
        if result:
            print("\n" + result)

    def speak(self) -> None:
        text = read_multiline("\nText to speak")
        audio = self.speech.speak(text)
        print_notice(self.speech)
        if audio:
            output_path = Path("output") / "speech.mp3"
            output_path.parent.mkdir(exist_ok=True)
            output_path.write_bytes(audio)
            print(f"Audio saved to: {output_path}")

    def show_gallery(self) -> None:
        self.gallery.refresh()
        print_notice(self.gallery)

        print(f"\nGallery ({len(self.gallery.images)} images)")
        print("-" * 50)
        for i, image in enumerate(self.gallery.images, 1):
            print(f"\n{i}. {image.prompt[:80]}")
            print(f"   ID: {image.id}")
            print(f"   Created: {format_created_at(image)}")

    def delete_image(self) -> None:
        record_id = input("\nID of the image to delete: ").strip()
        if not record_id:
            return
        self.gallery.delete(record_id)
        print_notice(self.gallery)


def build_shell(offline: bool = False) -> LearnXShell:
    """Wire controllers to the configured backend, or an in-memory gallery."""
    settings = get_settings()
    if offline:
        store = InMemoryGalleryStore(table=settings.images_table)
        repository, feed = store, store
    else:
        repository, feed = create_gallery_backend(settings)
    return LearnXShell(FunctionsClient(), repository, feed)


def main() -> None:
    """Main CLI loop."""
    parser = argparse.ArgumentParser(description="Terminal client for the LearnX tools")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Keep the gallery in memory instead of the managed backend",
    )
    args = parser.parse_args()

    setup_logging("WARNING")

    try:
        shell = build_shell(offline=args.offline)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print_header()
    print_help()

    commands = {
        "image": shell.generate_image,
        "analyze": shell.analyze_image,
        "write": shell.write_content,
        "slides": shell.generate_slides,
        "transcribe": shell.transcribe_audio,
        "speak": shell.speak,
        "gallery": shell.show_gallery,
        "delete": shell.delete_image,
    }

    while True:
        try:
            command = input("\n🎓 learnx> ").strip().lower()

            if command in ("exit", "quit", "q"):
                print("\nGoodbye!")
                sys.exit(0)

            elif command in ("help", "h", "?"):
                print_help()

            elif command in commands:
                commands[command]()

            elif command == "":
                continue

            else:
                print(f"Unknown command: {command}")
                print("Type 'help' for available commands.")

        except GalleryError as e:
            print(f"\nGallery error: {e}")
        except KeyboardInterrupt:
            print("\n\nInterrupted. Type 'exit' to quit.")
        except EOFError:
            print("\nGoodbye!")
            sys.exit(0)


if __name__ == "__main__":
    main()
