#!/usr/bin/env python3

"""
List the releases of reference intergenic regions available for this package.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

@Date: 2025-07-01

"""

import sys
import os
import argparse
import logging

# Add the parent directory to sys.path to allow imports from sibling directories
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from intergenic_call.release_utilities import RELEASE_URL, list_intergenic_release

def main(args):
    """
    Main function to list intergenic releases.

    Args:
        args: Parsed command line arguments containing:
            - release: Targeted release (optional)
            - release_url: URL of the release file
            - output_file: Output file path (optional, printed to stdout otherwise)
    """
    try:
        releases = list_intergenic_release(release=args.release, release_url=args.release_url,
                                           verbose=args.verbose)
    except Exception as e:
        logging.error(f"Failed to list intergenic releases: {e}")
        sys.exit(1)

    if args.output_file:
        releases.to_csv(args.output_file, sep='\t', index=False)
    else:
        print(releases.to_string(index=False))
    return releases

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='List available releases of reference intergenic regions')
    parser.add_argument('--release', default=None, help='Targeted release (default: all releases)')
    parser.add_argument('--release-url', default=RELEASE_URL, help=f'URL of the release file (default: {RELEASE_URL})')
    parser.add_argument('--output-file', default=None, help='Write the releases to this file instead of stdout')
    parser.add_argument('--verbose', '-v', action='store_true', help='Print debug messages')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    main(args)
