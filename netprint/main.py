#!/usr/bin/env python3
"""
netprint - Network printer scanner

Discovers IPP printers announced over mDNS/DNS-SD, fetches their capabilities
and optionally validates and sends a document to one of them.

Usage:
    netprint-scan [options]
    python -m netprint [options]

Environment Variables:
    NETPRINT_SCAN_DURATION     Seconds to browse for printers
    NETPRINT_REQUEST_TIMEOUT   Timeout for IPP requests
    NETPRINT_USER              requesting-user-name sent to printers
    LOG_LEVEL                  Logging level
    LOG_FILE                   Log file path
"""

import argparse
import logging
import mimetypes
import os
import sys
from typing import List, Optional

# Cargar variables desde archivo .env antes de leer la configuración
from dotenv import load_dotenv
load_dotenv()

from .config.settings import settings
from .discovery.manager import PrintManager
from .errors import NetPrintError
from .ipp.job_attributes import JobAttributes
from .ipp.page_ranges import extract_page_ranges, format_page_ranges
from .ipp.printer_attributes import PrinterAttributes, orientation_presentation_name, side_presentation_name
from .printer import Printer
from .utils import format_bytes, setup_logging, validate_configuration

logger = logging.getLogger(__name__)

def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:

    parser = argparse.ArgumentParser(
        prog="netprint-scan",
        description="Discover IPP network printers and inspect their capabilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
            Examples:
                netprint-scan                                   # Scan with default settings
                netprint-scan --duration 10 --output printers.txt
                netprint-scan --printer abc123 --print doc.pdf --pages "1-3, 5"
                    """
    )

    parser.add_argument('--duration', type=float, default=settings.SCAN_DURATION,
                        help='Seconds to browse for printers (default: from config)')
    parser.add_argument('--output',
                        help='Write the printer report to this file')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: from config)')
    parser.add_argument('--log-file',
                        help='Log file path (default: console only)')
    parser.add_argument('--user',
                        help='HTTP Basic user for printers that require authentication')
    parser.add_argument('--password',
                        help='HTTP Basic password')
    parser.add_argument('--tls', action='store_true',
                        help='Use ipps/https instead of ipp/http')
    parser.add_argument('--printer',
                        help='ID of the printer to send --print to')
    parser.add_argument('--print', dest='document',
                        help='Document to validate and submit')
    parser.add_argument('--mime-type',
                        help='document-format of --print (default: guessed from the file name)')
    parser.add_argument('--copies', type=int, default=1,
                        help='Number of copies (default: 1)')
    parser.add_argument('--pages',
                        help='Page ranges, e.g. "1-3, 5"')
    parser.add_argument('--version', action='version',
                        version=f'netprint v{settings.VERSION}')

    return parser.parse_args(argv)

def describe_printer(printer: Printer, capabilities: Optional[PrinterAttributes]) -> List[str]:
    lines = [
        f"{printer.name} [{printer.id}]",
        f"  URI: {printer.printer_uri()}",
        f"  Formats: {', '.join(printer.mime_types) or '-'}",
        f"  Color: {'yes' if printer.color else 'no'} - Duplex: {'yes' if printer.duplex else 'no'}",
        f"  Authentication: {printer.auth_info_required}",
    ]
    if capabilities is None:
        return lines

    lines.append(f"  Max copies: {capabilities.max_copies()}")
    lines.append(f"  Page ranges: {'yes' if capabilities.page_ranges_supported() else 'no'}")
    sides = capabilities.supported_sides()
    if sides:
        lines.append(f"  Sides: {', '.join(side_presentation_name(side) for side in sides)}")
    orientations = capabilities.supported_orientations()
    if orientations:
        lines.append(f"  Orientations: {', '.join(orientation_presentation_name(o) for o in orientations)}")
    margins = capabilities.minimum_margins()
    lines.append(f"  Margins: top={margins.top} left={margins.left} bottom={margins.bottom} right={margins.right}")

    for name in sorted(capabilities):
        values = ', '.join(str(item.value) for item in capabilities[name])
        lines.append(f"    {name}: {values}")
    return lines

def build_job_attributes(args: argparse.Namespace) -> Optional[JobAttributes]:
    job = JobAttributes()
    job.set_copies(args.copies)
    if args.pages:
        ranges, ok = extract_page_ranges(args.pages)
        if not ok:
            logger.error(f"Invalid page ranges: '{args.pages}'")
            return None
        job.set_page_ranges(ranges)
        logger.info(f"Page ranges: {format_page_ranges(ranges)}")
    return job

def print_document(printer: Printer, args: argparse.Namespace) -> int:
    path = args.document
    if not os.path.isfile(path):
        logger.error(f"Document not found: {path}")
        return 1

    mime_type = args.mime_type or mimetypes.guess_type(path)[0] or 'application/octet-stream'
    if printer.mime_types and not printer.mime_type_supported(mime_type):
        logger.warning(f"{printer.name} does not advertise {mime_type}")

    job = build_job_attributes(args)
    if job is None:
        return 1

    job_name = os.path.basename(path)
    unsupported = printer.validate_job(job_name, mime_type, job, settings.REQUEST_TIMEOUT)
    for name in sorted(unsupported):
        logger.warning(f"Unsupported job attribute: {name}")

    size = os.path.getsize(path)
    logger.info(f"Sending {job_name} ({format_bytes(size)}, {mime_type}) to {printer.name}")
    with open(path, 'rb') as document:
        job_id = printer.submit_job(job_name, mime_type, document, size, job, settings.REQUEST_TIMEOUT)

    logger.info(f"Job accepted by {printer.name}: job-id {job_id}")
    return 0

def main(argv: Optional[List[str]] = None) -> int:

    args = parse_arguments(argv)
    setup_logging(args.log_level, args.log_file)

    if not validate_configuration():
        logger.error("Configuration validation failed, exiting")
        return 1

    if args.document and not args.printer:
        logger.error("--print requires --printer")
        return 2

    manager = PrintManager(user=args.user, password=args.password, use_tls=args.tls)

    try:
        printers = manager.scan(args.duration)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    report: List[str] = []
    for printer in printers:
        capabilities = None
        try:
            capabilities = printer.fetch_capabilities(settings.REQUEST_TIMEOUT)
        except NetPrintError as e:
            logger.error(f"Could not get capabilities of {printer.name}: {e}")
        lines = describe_printer(printer, capabilities)
        for line in lines:
            logger.info(line)
        report.extend(lines)

    if not printers:
        logger.warning("No printers found")

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write('\n'.join(report) + '\n')
        logger.info(f"Report written to {args.output}")

    if args.document:
        printer = manager.lookup_printer(args.printer)
        if printer is None:
            logger.error(f"Printer not found: {args.printer}")
            return 1
        try:
            return print_document(printer, args)
        except NetPrintError as e:
            logger.error(f"Printing failed: {e}")
            return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
