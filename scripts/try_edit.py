#!/usr/bin/env python3
"""
Quick script to exercise a generate → edit session against the real APIs.

Usage:
    # First configure your API keys:
    python scripts/try_edit.py --configure

    # Generate, then apply one or more edits:
    python scripts/try_edit.py --prompt "A cute cat" --edit "Add a wizard hat"

    # Start from a local photo and replace its background:
    python scripts/try_edit.py --image car.jpg --background desert
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def configure():
    """Interactive configuration of API keys."""
    from image_edit_studio.providers import get_registry, ProviderConfig

    registry = get_registry()
    registry.load_config()

    print("=== Image Edit Studio - Provider Configuration ===\n")

    providers = [
        ("gemini", "Google Gemini"),
        ("removebg", "remove.bg"),
    ]

    for provider_id, name in providers:
        current = registry.get_config(provider_id)
        has_key = "✓" if current.api_key else "✗"
        print(f"{name}: [{has_key}]")

        answer = input(f"  Configure {name}? (y/n): ").strip().lower()
        if answer == "y":
            api_key = input("  Enter API key: ").strip()
            if api_key:
                registry.set_config(provider_id, ProviderConfig(api_key=api_key))
                provider = registry.get_provider(provider_id)
                if asyncio.run(provider.validate_credentials()):
                    print("  ✓ Key accepted")
                else:
                    print("  ✗ Key was rejected (saved anyway)")

    registry.save_config()
    print("\nConfiguration saved!")


async def run(args) -> int:
    """Drive one session from the command line."""
    from image_edit_studio.core.controller import ImageEditController
    from image_edit_studio.core.session import Session
    from image_edit_studio.providers import get_registry

    registry = get_registry()
    registry.load_config()

    gemini = registry.get_provider("gemini")
    if gemini is None or not gemini.is_configured:
        print("Error: Gemini is disabled or has no API key")
        print("Run: python scripts/try_edit.py --configure")
        return 1

    with Session() as session:
        controller = ImageEditController(
            session,
            provider=gemini,
            remover=registry.get_provider("removebg"),
        )

        if args.image:
            ok = controller.upload(args.image)
        else:
            print(f"Generating: {args.prompt}")
            ok = await controller.generate(args.prompt)
        if not ok:
            print(f"✗ Error: {session.ui.error}")
            return 1

        for instruction in args.edit:
            print(f"Editing: {instruction}")
            if not await controller.edit(instruction):
                print(f"✗ Error: {session.ui.error}")
                return 1

        if args.background:
            print(f"Replacing background: {args.background}")
            if not await controller.replace_background(args.background):
                print(f"✗ Error: {session.ui.error}")
                if controller.last_background_removed is not None:
                    path = controller.last_background_removed.save(args.output)
                    print(f"  Cutout saved to: {path.absolute()}")
                return 1

        path = controller.save_current(args.output)
        view = session.get_comparison_images()
        print("✓ Done")
        print(f"  Showing: {view.left_label} → {view.right_label}")
        print(f"  Saved to: {path.absolute()}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Try a generate/edit session")
    parser.add_argument("--configure", action="store_true", help="Configure API keys")
    parser.add_argument("--prompt", type=str, default="A beautiful sunset over mountains", help="Prompt for generation")
    parser.add_argument("--image", type=Path, help="Start from a PNG/JPG file instead of generating")
    parser.add_argument("--edit", action="append", default=[], help="Edit instruction (repeatable)")
    parser.add_argument("--background", choices=["showroom", "street", "desert", "studio"], help="Replace the background")
    parser.add_argument("--output", type=Path, default=Path("output"), help="Directory for saved images")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.configure:
        configure()
        return 0
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
