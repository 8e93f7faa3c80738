#!/usr/bin/env python3

"""
Summarize the abundance file of a library with tximport.

Abundances are summarized to gene level (intergenic regions being genes of
their own) unless --tx-out is given. The result is written as a tab separated
table with abundance, counts and length columns.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

@Date: 2025-07-01

"""

import sys
import os
import argparse
import logging

# Add the parent directory to sys.path to allow imports from sibling directories
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from intergenic_call.aggregation_utilities import run_tximport, write_aggregation_result
from intergenic_call.metadata_utilities import add_metadata_arguments, metadata_from_args

def main(args):
    """
    Main function to run tximport on one library.

    Args:
        args: Parsed command line arguments containing the metadata arguments and:
            - output_file: Output file path (optional)
    """
    try:
        abundance_metadata, user_metadata, context = metadata_from_args(args)

        output_file = args.output_file
        if not output_file:
            level = 'transcript' if abundance_metadata.tx_out else 'gene'
            output_file = os.path.join(context.output_dir, f"tximport_{level}_level.tsv")

        result = run_tximport(abundance_metadata, user_metadata, context, abundance_file=args.abundance_file)
        os.makedirs(os.path.dirname(os.path.abspath(output_file)), exist_ok=True)
        write_aggregation_result(result, output_file)
    except Exception as e:
        logging.error(f"Failed during tximport: {e}")
        sys.exit(1)

    return output_file

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Summarize the abundance file of a library with tximport')
    add_metadata_arguments(parser)
    parser.add_argument('--output-file', default=None,
                        help='Output file path (default: tximport_[gene|transcript]_level.tsv in the output directory)')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    main(args)
