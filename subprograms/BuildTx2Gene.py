#!/usr/bin/env python3

"""
Create the transcript to gene mapping (tx2gene) of a species.

The mapping contains the annotated transcripts and the intergenic regions, each
intergenic region being its own gene. It is cached in the annotation directory
and only computed once per annotation and version setting.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

@Date: 2025-07-01

"""

import sys
import os
import argparse
import logging

# Add the parent directory to sys.path to allow imports from sibling directories
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from intergenic_call.mapping_utilities import create_tx2gene
from intergenic_call.metadata_utilities import add_metadata_arguments, metadata_from_args

def main(args):
    """
    Main function to create the tx2gene file.

    Args:
        args: Parsed command line arguments (see add_metadata_arguments)
    """
    try:
        abundance_metadata, user_metadata, context = metadata_from_args(args)
        tx2gene_path = create_tx2gene(abundance_metadata, user_metadata, context)
    except Exception as e:
        logging.error(f"Failed during tx2gene generation: {e}")
        sys.exit(1)

    logging.info(f"tx2gene file: {tx2gene_path}")
    return tx2gene_path

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Create the transcript to gene mapping of a species')
    add_metadata_arguments(parser)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    main(args)
