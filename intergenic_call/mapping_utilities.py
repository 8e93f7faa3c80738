"""
Set of functions to create the transcript to gene (tx2gene) mapping used to
aggregate abundances. The mapping contains both genic and intergenic regions.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

"""

import csv
import logging
import os
import pandas as pd

from intergenic_call.annotation_utilities import create_txdb, keys, select
from intergenic_call.intergenic_utilities import get_intergenic_ids, intergenic_tx2gene

TX2GENE_COLUMNS = ['TXNAME', 'GENEID']


def strip_tx_version(tx_names):
    """Remove everything from the first dot of each transcript name."""
    return tx_names.astype(str).str.replace(r'\..*', '', regex=True)


def genic_tx2gene(txdb, ignore_tx_version=False):
    """
    Generate the transcript to gene mapping of annotated transcripts.

    Parameters
    ----------
    txdb : TranscriptDatabase
        Transcript database of the annotation
    ignore_tx_version : bool
        If True, the version suffix of transcript names is removed

    Returns
    -------
    pd.DataFrame
        DataFrame with columns TXNAME and GENEID, one row per transcript
    """
    tx_names = keys(txdb, 'TXNAME')
    tx2gene = select(txdb, tx_names, 'GENEID', 'TXNAME')[TX2GENE_COLUMNS].copy()

    # Remove the transcript version that can be present in transcript ids of gtf files
    if ignore_tx_version:
        logging.debug("Removing transcript version info from genic transcripts")
        tx2gene['TXNAME'] = strip_tx_version(tx2gene['TXNAME'])
        duplicated = tx2gene.duplicated(subset=['TXNAME'])
        if duplicated.any():
            logging.warning(f"{duplicated.sum()} transcripts share a name once their version is removed. "
                            f"Only the first occurrence is kept.")
            tx2gene = tx2gene[~duplicated]

    return tx2gene.reset_index(drop=True)


def write_tx2gene(tx2gene, tx2gene_path):
    """
    Write a tx2gene table as an unquoted tab separated file. The table is
    written next to its destination and then moved in place so that readers
    never see a partially written file.
    """
    temp_path = tx2gene_path + '.tmp'
    tx2gene[TX2GENE_COLUMNS].to_csv(temp_path, sep='\t', index=False, quoting=csv.QUOTE_NONE, encoding='utf-8')
    os.replace(temp_path, tx2gene_path)


def load_tx2gene(tx2gene_path):
    """Read a tx2gene file written by write_tx2gene."""
    return pd.read_csv(tx2gene_path, sep='\t', dtype=str, keep_default_na=False, encoding='utf-8')


def create_tx2gene(abundance_metadata, user_metadata, context,
                   txdb_factory=create_txdb, intergenic_source=get_intergenic_ids):
    """
    Create the tx2gene file as used by tximport. The file contains both genic
    and intergenic regions. Nothing is computed if the file already exists.

    Parameters
    ----------
    abundance_metadata : AbundanceMetadata
        Defines whether transcript versions are ignored
    user_metadata : UserMetadata
        Annotation and intergenic files of the species
    context : RunContext
        Defines the directory where the tx2gene file is cached
    txdb_factory : callable
        Function returning the transcript database of user_metadata
    intergenic_source : callable
        Function returning the intergenic ids of user_metadata

    Returns
    -------
    str
        Path to the tx2gene file
    """
    tx2gene_path = context.tx2gene_path(abundance_metadata)
    if os.path.exists(tx2gene_path):
        logging.debug(f"Using existing tx2gene file {tx2gene_path}")
        return tx2gene_path

    logging.info(f"Generate file {abundance_metadata.tx2gene_name}")
    os.makedirs(context.annotation_dir, exist_ok=True)

    txdb = txdb_factory(user_metadata)
    genic = genic_tx2gene(txdb, abundance_metadata.ignore_tx_version)
    intergenic = intergenic_tx2gene(intergenic_source(user_metadata))

    tx2gene = pd.concat([genic, intergenic], ignore_index=True)
    write_tx2gene(tx2gene, tx2gene_path)
    logging.info(f"Wrote {len(genic)} genic and {len(intergenic)} intergenic mappings to {tx2gene_path}")
    return tx2gene_path


def build_tx2gene(abundance_metadata, user_metadata, context, **kwargs):
    """Create the tx2gene file if needed and return its content."""
    return load_tx2gene(create_tx2gene(abundance_metadata, user_metadata, context, **kwargs))
