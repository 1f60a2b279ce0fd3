#!/usr/bin/env python3
"""
Entry point for the album import tool.
"""

import argparse
import sys

import requests
from loguru import logger

from albumsync.config import load_user_config
from albumsync.google_photos_api import GooglePhotosError
from albumsync.log import init_logging
from albumsync.syncer import AlbumSync

REMOTE_COMMANDS = {"import-takeout", "import-album", "download", "redownload", "upload"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Google Photos album + takeout importer")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add-takeout", help="register a takeout folder for an album")
    p.add_argument("id")
    p.add_argument("album_name")
    p.add_argument("path", help="folder relative to the takeouts dir")
    p.add_argument("--label", default="")

    sub.add_parser("list-takeouts", help="list registered takeouts")

    p = sub.add_parser("import-takeout", help="import a registered takeout")
    p.add_argument("id")

    p = sub.add_parser("import-album", help="import an album from a takeout folder")
    p.add_argument("album_name")
    p.add_argument("takeout_folder")

    sub.add_parser("download", help="download bytes for catalog items missing locally")

    p = sub.add_parser("redownload", help="force a fresh download of one item")
    p.add_argument("id")

    p = sub.add_parser("delete", help="delete items and their local files")
    p.add_argument("ids", nargs="+")

    sub.add_parser("list-local", help="list folders ready for local import")

    p = sub.add_parser("import-local", help="import a local folder of images")
    p.add_argument("folder")

    p = sub.add_parser("convert-heic", help="convert a folder of HEIC files to JPEG, keeping EXIF")
    p.add_argument("folder", help="folder relative to the local import dir")
    p.add_argument("output", help="output folder relative to the local import dir")

    p = sub.add_parser("upload", help="upload a local file to Google Photos")
    p.add_argument("path")
    p.add_argument("--description", default="Uploaded via albumsync")

    sub.add_parser("init-keywords", help="create the root and People keyword nodes")
    return parser


def run(args, syncer: AlbumSync) -> int:
    if args.command in REMOTE_COMMANDS:
        syncer.authenticate()

    if args.command == "add-takeout":
        syncer.add_takeout(args.id, args.label or args.album_name, args.album_name, args.path)
    elif args.command == "list-takeouts":
        for takeout in syncer.list_takeouts():
            print(f"{takeout.id}\t{takeout.label}\t{takeout.album_name}\t{takeout.path}")
    elif args.command in ("import-takeout", "import-album"):
        if args.command == "import-takeout":
            result = syncer.import_takeout(args.id)
        else:
            result = syncer.import_from_takeout(args.album_name, args.takeout_folder)
        if result is None:
            print("Nothing imported: takeout or album not found.")
            return 1
        print(
            f"Added {len(result.added)}, updated {len(result.updated)}, "
            f"deleted {len(result.deleted)}, unchanged {result.unchanged}"
        )
    elif args.command == "download":
        report = syncer.download_missing()
        print(f"Downloaded {report.downloaded_count}, skipped {report.skipped_count}, failed {len(report.failures)}")
    elif args.command == "redownload":
        report = syncer.redownload_media_item(args.id)
        if report is None or report.failures:
            print(f"Redownload of {args.id} failed.")
            return 1
    elif args.command == "delete":
        result = syncer.delete_media_items(args.ids)
        print(f"Deleted {len(result.deleted)}; not found {len(result.not_found)}; "
              f"file errors {len(result.file_failures)}")
    elif args.command == "list-local":
        for name in syncer.list_import_folders():
            print(name)
    elif args.command == "import-local":
        items = syncer.import_local_folder(args.folder)
        print(f"Imported {len(items)} local images")
    elif args.command == "convert-heic":
        report = syncer.convert_heic_folder(args.folder, args.output)
        print(f"Converted {len(report.converted)}, failed {len(report.failed)}")
        if report.failed:
            return 1
    elif args.command == "upload":
        media_id = syncer.upload_local_file(args.path, args.description)
        if media_id is None:
            return 1
        print(media_id)
    elif args.command == "init-keywords":
        syncer.keyword_manager.initialize_keyword_tree()
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_user_config()
    init_logging(level=config["logLevel"])

    try:
        return run(args, AlbumSync(config))
    except (GooglePhotosError, requests.RequestException, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
