#!/usr/bin/env python3
"""
IntergenicCall reconciles transcript level RNA-seq quantification with a gene
annotation, using intergenic regions as genes of their own.

@author: Luis Javier Madrigal Roca, Paris Veltsos and John K. Kelly.

@date: 2025-07-01

@version: 1.0.0

"""

import argparse
import logging
import sys
import os

# Add the project directory to the path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from subprograms.BuildTx2Gene import main as build_tx2gene_main
from subprograms.RunTximport import main as run_tximport_main
from subprograms.AbundanceWithoutIntergenic import main as abundance_without_intergenic_main
from subprograms.ListIntergenicRelease import main as list_intergenic_release_main
from intergenic_call.metadata_utilities import add_metadata_arguments
from intergenic_call.release_utilities import RELEASE_URL

def main():
    # Create the main parser
    parser = argparse.ArgumentParser(description="IntergenicCall: tx2gene and abundance reconciliation with intergenic regions.")
    subparsers = parser.add_subparsers(dest='command', help='Subcommands')

    # --- tx2gene Subcommand ---
    tx2gene_parser = subparsers.add_parser('BuildTx2Gene', help='Create the transcript to gene mapping, intergenic regions included')
    add_metadata_arguments(tx2gene_parser)

    # --- tximport Subcommand ---
    tximport_parser = subparsers.add_parser('RunTximport', help='Summarize the abundance file of a library with tximport')
    add_metadata_arguments(tximport_parser)
    tximport_parser.add_argument('--output-file', default=None,
                                 help='Output file path (default: tximport_[gene|transcript]_level.tsv in the output directory)')

    # --- Abundance without intergenic Subcommand ---
    without_intergenic_parser = subparsers.add_parser('AbundanceWithoutIntergenic',
                                                      help='Summarize abundances once intergenic regions are removed and TPM recomputed')
    add_metadata_arguments(without_intergenic_parser)
    without_intergenic_parser.add_argument('--output-file', default=None,
                                           help='Output file path (default: tximport_without_intergenic.tsv in the output directory)')

    # --- Release listing Subcommand ---
    release_parser = subparsers.add_parser('ListIntergenicRelease', help='List available releases of reference intergenic regions')
    release_parser.add_argument('--release', default=None, help='Targeted release (default: all releases)')
    release_parser.add_argument('--release-url', default=RELEASE_URL, help=f'URL of the release file (default: {RELEASE_URL})')
    release_parser.add_argument('--output-file', default=None, help='Write the releases to this file instead of stdout')
    release_parser.add_argument('--verbose', '-v', action='store_true', help='Print debug messages')

    # Parse arguments
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'verbose', False) else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Execute the appropriate subcommand
    if args.command == 'BuildTx2Gene':
        build_tx2gene_main(args)
    elif args.command == 'RunTximport':
        run_tximport_main(args)
    elif args.command == 'AbundanceWithoutIntergenic':
        abundance_without_intergenic_main(args)
    elif args.command == 'ListIntergenicRelease':
        list_intergenic_release_main(args)
    else:
        parser.print_help()

if __name__ == "__main__":
    main()
