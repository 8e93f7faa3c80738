#!/usr/bin/env python3

"""
Summarize the abundance file of a library once intergenic regions are removed.

TPM values are computed again over the annotated transcripts only before
running tximport with a tx2gene mapping without intergenic regions.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

@Date: 2025-07-01

"""

import sys
import os
import argparse
import logging

# Add the parent directory to sys.path to allow imports from sibling directories
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from intergenic_call.aggregation_utilities import write_aggregation_result
from intergenic_call.metadata_utilities import add_metadata_arguments, metadata_from_args
from intergenic_call.reconciliation_utilities import abundance_without_intergenic

def main(args):
    try:
        abundance_metadata, user_metadata, context = metadata_from_args(args)
        output_file = args.output_file or os.path.join(context.output_dir, 'tximport_without_intergenic.tsv')

        result = abundance_without_intergenic(abundance_metadata, user_metadata, context,
                                              abundance_file=args.abundance_file)
        os.makedirs(os.path.dirname(os.path.abspath(output_file)), exist_ok=True)
        write_aggregation_result(result, output_file)
    except Exception as e:
        logging.error(f"Failed while removing intergenic regions: {e}")
        sys.exit(1)

    return output_file

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Summarize abundances without intergenic regions')
    add_metadata_arguments(parser)
    parser.add_argument('--output-file', default=None,
                        help='Output file path (default: tximport_without_intergenic.tsv in the output directory)')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    main(args)
