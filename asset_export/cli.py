"""
Command Line Interface for design asset export.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .asset_db import AssetDb
from .db_config import DbConfig
from .exceptions import AssetExportError
from .export_request import CropArea, ExportRequest
from .export_service import AssetExportService
from .export_settings import ExportSettings
from .formats import EXPORT_FORMATS, RESOLUTION_SCALES
from .s3_config import S3Config
from .server import json_datetime_handler
from .storage_factory import create_storage_client


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    return logging.getLogger('asset_export')


def get_s3_config(args: argparse.Namespace) -> S3Config:
    """Get S3 configuration from environment and CLI overrides."""
    config = S3Config.from_env()

    if getattr(args, 's3_endpoint', None):
        config.endpoint = args.s3_endpoint
    if getattr(args, 's3_bucket', None):
        config.bucket = args.s3_bucket
    if getattr(args, 's3_prefix', None):
        config.prefix = args.s3_prefix
    if getattr(args, 's3_access_key', None):
        config.access_key = args.s3_access_key
    if getattr(args, 's3_secret_key', None):
        config.secret_key = args.s3_secret_key

    return config


def get_db_config(args: argparse.Namespace) -> DbConfig:
    """Get database configuration from environment and CLI overrides."""
    config = DbConfig.from_env()

    if getattr(args, 'db_host', None):
        config.host = args.db_host
    if getattr(args, 'db_port', None):
        config.port = args.db_port
    if getattr(args, 'db_name', None):
        config.database = args.db_name

    return config


def build_service(args: argparse.Namespace, logger: logging.Logger) -> AssetExportService:
    """
    Build an export service from CLI arguments and environment.

    Raises:
        ValueError: if the storage or database configuration is invalid
    """
    storage = create_storage_client(
        local_root=getattr(args, 'local_root', None),
        local_prefix=getattr(args, 'local_prefix', None) or '',
        local_public_url=getattr(args, 'local_public_url', None),
        s3_config=None if getattr(args, 'local_root', None) else get_s3_config(args),
        logger=logger,
    )

    db_config = get_db_config(args)
    errors = db_config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ValueError("Database configuration invalid")

    return AssetExportService.from_settings(
        storage=storage,
        asset_db=AssetDb(db_config, logger),
        settings=ExportSettings.from_env(),
        logger=logger,
    )


def parse_crop(value: str) -> CropArea:
    """Parse an 'x,y,width,height' crop argument."""
    try:
        x, y, width, height = (float(part) for part in value.split(','))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Crop must be x,y,width,height: {value!r}")
    return CropArea(x=x, y=y, width=width, height=height)


def print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=json_datetime_handler))


def cmd_export(args: argparse.Namespace) -> int:
    """Execute export command."""
    logger = setup_logging(args.verbose)

    try:
        service = build_service(args, logger)
    except ValueError:
        return 1

    request = ExportRequest(
        design_file_id=args.design_file,
        source_image_url=args.image,
        name=args.name,
        format=args.format,
        scale=args.scale,
        quality=args.quality,
        crop_area=args.crop,
        max_size_bytes=args.max_size,
        created_by=args.user,
    )

    try:
        asset = service.export_asset(request)
    except AssetExportError as e:
        logger.error(str(e))
        return 1

    print_json(asset.to_dict())
    return 0


def cmd_batch(args: argparse.Namespace) -> int:
    """Execute batch command."""
    logger = setup_logging(args.verbose)

    try:
        service = build_service(args, logger)
    except ValueError:
        return 1

    try:
        result = service.batch_export(
            design_file_id=args.design_file,
            source_image_url=args.image,
            base_name=args.base_name,
            formats=args.format,
            scales=args.scale,
            quality=args.quality,
            crop_area=args.crop,
            created_by=args.user,
        )
    except AssetExportError as e:
        logger.error(str(e))
        return 1

    if not args.quiet:
        print_json(result.to_dict())
    print(f"Exported: {result.total_successful}/{result.total_processed}")
    print(f"Failed: {result.total_failed}")

    return 0 if result.all_succeeded else 1


def cmd_list(args: argparse.Namespace) -> int:
    """Execute list command."""
    logger = setup_logging(args.verbose)

    try:
        service = build_service(args, logger)
    except ValueError:
        return 1

    try:
        if args.design_file:
            assets = service.get_exported_assets(args.design_file)
        else:
            assets = service.get_project_assets(args.project)
    except AssetExportError as e:
        logger.error(str(e))
        return 1

    print_json([asset.to_dict() for asset in assets])
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Execute delete command."""
    logger = setup_logging(args.verbose)

    try:
        service = build_service(args, logger)
    except ValueError:
        return 1

    try:
        service.delete_exported_asset(args.asset)
    except AssetExportError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Deleted asset {args.asset}")
    return 0


def cmd_download(args: argparse.Namespace) -> int:
    """Execute download command."""
    logger = setup_logging(args.verbose)

    try:
        service = build_service(args, logger)
    except ValueError:
        return 1

    try:
        data = service.download_assets_as_zip(args.asset)
    except AssetExportError as e:
        logger.error(str(e))
        return 1

    with open(args.output, 'wb') as f:
        f.write(data)
    logger.info(f"Wrote {len(args.asset)} assets to {args.output}")
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    """Execute init-db command."""
    logger = setup_logging(args.verbose)

    db_config = get_db_config(args)
    errors = db_config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    try:
        AssetDb(db_config, logger).create_tables()
    except AssetExportError as e:
        logger.error(str(e))
        return 1

    logger.info("Tables ready")
    return 0


def add_storage_arguments(parser: argparse.ArgumentParser) -> None:
    """Add storage and database configuration arguments to a parser."""
    local_group = parser.add_argument_group('Local Storage')
    local_group.add_argument('--local-root', metavar='PATH',
                             help='Use local filesystem instead of S3')
    local_group.add_argument('--local-prefix', default='',
                             help='Prefix within local root')
    local_group.add_argument('--local-public-url', metavar='URL',
                             help='Base URL the local root is served from')

    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')
    s3_group.add_argument('--s3-bucket', help='Override S3_BUCKET')
    s3_group.add_argument('--s3-prefix', help='Override S3_PREFIX')
    s3_group.add_argument('--s3-access-key', help='Override S3_ACCESS_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override S3_SECRET_KEY')

    db_group = parser.add_argument_group('Database')
    db_group.add_argument('--db-host', help='Override SQL_HOST')
    db_group.add_argument('--db-port', type=int, help='Override SQL_PORT')
    db_group.add_argument('--db-name', help='Override SQL_DATABASE')


def add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('-d', '--design-file', required=True, help='Design file id')
    parser.add_argument('-i', '--image', required=True, help='Source image URL or path')
    parser.add_argument('-q', '--quality', type=float, help='Quality for jpg/webp (0.1-1.0)')
    parser.add_argument('--crop', type=parse_crop, metavar='X,Y,W,H', help='Crop region in source pixels')
    parser.add_argument('-u', '--user', help='Id of the user the export is attributed to')


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='asset_export',
        description='Export design file previews as image assets',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m asset_export export -d <design-file> -i preview.png -n logo -f png -s 2
  python -m asset_export batch -d <design-file> -i preview.png -b logo -f png -f webp -s 1 -s 2
  python -m asset_export list --design-file <design-file>
  python -m asset_export delete --asset <asset-id>

Storage options:
  Use --local-root for local filesystem, or S3 environment variables for S3.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    export_parser = subparsers.add_parser('export', help='Export a single asset')
    add_source_arguments(export_parser)
    export_parser.add_argument('-n', '--name', required=True, help='Asset name')
    export_parser.add_argument('-f', '--format', required=True, choices=EXPORT_FORMATS, help='Export format')
    export_parser.add_argument('-s', '--scale', type=int, default=1, choices=RESOLUTION_SCALES,
                               help='Resolution scale (default: 1)')
    export_parser.add_argument('--max-size', type=int, metavar='BYTES', help='Maximum encoded size in bytes')
    export_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(export_parser)

    batch_parser = subparsers.add_parser('batch', help='Export every format x scale combination')
    add_source_arguments(batch_parser)
    batch_parser.add_argument('-b', '--base-name', required=True, help='Base asset name')
    batch_parser.add_argument('-f', '--format', action='append', required=True, choices=EXPORT_FORMATS,
                              help='Format(s) to export')
    batch_parser.add_argument('-s', '--scale', action='append', type=int, required=True,
                              choices=RESOLUTION_SCALES, help='Scale(s) to export')
    batch_parser.add_argument('--quiet', action='store_true', help='Only print the summary')
    batch_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(batch_parser)

    list_parser = subparsers.add_parser('list', help='List exported assets, newest first')
    target = list_parser.add_mutually_exclusive_group(required=True)
    target.add_argument('--design-file', help='Design file id')
    target.add_argument('--project', help='Project id')
    list_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(list_parser)

    delete_parser = subparsers.add_parser('delete', help='Delete an exported asset')
    delete_parser.add_argument('-a', '--asset', required=True, help='Asset id')
    delete_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(delete_parser)

    download_parser = subparsers.add_parser('download', help='Download assets as a zip archive')
    download_parser.add_argument('-a', '--asset', action='append', required=True, help='Asset id(s)')
    download_parser.add_argument('-o', '--output', default='exported-assets.zip', help='Output zip file')
    download_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(download_parser)

    init_parser = subparsers.add_parser('init-db', help='Create the exported_assets table')
    init_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(init_parser)

    return parser


COMMANDS = {
    'export': cmd_export,
    'batch': cmd_batch,
    'list': cmd_list,
    'delete': cmd_delete,
    'download': cmd_download,
    'init-db': cmd_init_db,
}


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    return COMMANDS[parsed_args.command](parsed_args)


if __name__ == '__main__':
    sys.exit(main())
