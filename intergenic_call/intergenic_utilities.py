"""
Set of functions to retrieve the intergenic regions used as decoys

@Author: Luis Javier Madrigal-Roca & John K. Kelly

"""

import gzip
import logging
import pandas as pd
from Bio import SeqIO

FASTA_EXTENSIONS = ('.fa', '.fasta', '.fna', '.fa.gz', '.fasta.gz', '.fna.gz')

INTERGENIC_HEADER = 'intergenic_ids'


def read_intergenic_fasta_ids(fasta_path):
    """
    Read the identifiers of the reference intergenic sequences.

    Parameters
    ----------
    fasta_path : str
        Path to the reference intergenic FASTA file (can be gzipped)

    Returns
    -------
    list
        Identifiers in file order
    """
    opener = gzip.open if fasta_path.endswith('.gz') else open
    with opener(fasta_path, 'rt') as handle:
        return [record.id for record in SeqIO.parse(handle, 'fasta')]


def read_intergenic_id_list(list_path):
    """
    Read a text file with one intergenic id per line. An 'intergenic_ids'
    header line is skipped when present.
    """
    with open(list_path, 'r') as handle:
        ids = [line.strip() for line in handle if line.strip()]
    if ids and ids[0] == INTERGENIC_HEADER:
        ids = ids[1:]
    return ids


def get_intergenic_ids(user_metadata):
    """
    Return the ids of the intergenic regions of the species of user_metadata.

    Parameters
    ----------
    user_metadata : UserMetadata
        Must define intergenic_file

    Returns
    -------
    list
        De-duplicated intergenic ids, in file order
    """
    intergenic_file = user_metadata.intergenic_file
    try:
        if intergenic_file.lower().endswith(FASTA_EXTENSIONS):
            ids = read_intergenic_fasta_ids(intergenic_file)
        else:
            ids = read_intergenic_id_list(intergenic_file)
    except FileNotFoundError:
        logging.error(f"Intergenic file not found: {intergenic_file}")
        raise

    unique_ids = list(dict.fromkeys(ids))
    if len(unique_ids) != len(ids):
        logging.warning(f"{len(ids) - len(unique_ids)} duplicated intergenic ids ignored in {intergenic_file}")
    logging.info(f"Read {len(unique_ids)} intergenic regions from {intergenic_file}")
    return unique_ids


def intergenic_tx2gene(intergenic_ids):
    """
    Generate the transcript to gene mapping of intergenic regions. Each region
    is considered as a gene of the same name, so both columns are identical.

    Parameters
    ----------
    intergenic_ids : list
        Intergenic region ids

    Returns
    -------
    pd.DataFrame
        DataFrame with columns TXNAME and GENEID
    """
    return pd.DataFrame({'TXNAME': list(intergenic_ids), 'GENEID': list(intergenic_ids)}, dtype=str)
