"""
Rewrite the names of intergenic regions that contain a dot.

Intergenic regions are named CONTIGNAME_START_STOP. When transcript versions
are ignored, the aggregator removes everything after the first dot of every
transcript name, so a region located on a contig whose name contains a dot
(e.g., KB708127.1_324_4365) would become KB708127 and its reads would be lost.
Before aggregation these dots are replaced by underscores, both in the tx2gene
mapping and in a copy of the abundance file.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict

import pandas as pd

from intergenic_call.exceptions import AggregationError

TEMP_ABUNDANCE_FILE = 'temp_abundance.tsv'


@dataclass
class NormalizedInputs:
    """Inputs of the aggregator once intergenic names have been normalized."""
    tx2gene: pd.DataFrame
    abundance_file: str
    normalization_map: Dict[str, str] = field(default_factory=dict)
    is_temporary: bool = False


def safe_name(name):
    return name.replace('.', '_')


def intergenic_normalization_map(tx2gene):
    """
    Map each intergenic name containing a dot to its normalized name.

    Intergenic rows are the rows of tx2gene where TXNAME equals GENEID.

    Returns
    -------
    dict
        {original name: normalized name}

    Raises
    ------
    AggregationError
        If a normalized name is shared with another transcript of tx2gene.
        Their abundances would otherwise be summed into a single gene.
    """
    intergenic = tx2gene.loc[tx2gene['TXNAME'] == tx2gene['GENEID'], 'TXNAME']
    with_dot = intergenic[intergenic.str.contains('.', regex=False)].drop_duplicates()
    normalization_map = {name: safe_name(name) for name in with_dot}

    # Every transcript name is normalized, so compare against all of them
    normalized_names = tx2gene['TXNAME'].drop_duplicates().map(safe_name).value_counts()
    collisions = {name for name in normalization_map.values() if normalized_names.get(name, 0) > 1}
    if collisions:
        colliding = sorted(tx for tx in tx2gene['TXNAME'].unique() if safe_name(tx) in collisions)
        logging.error(f"Normalized intergenic names collide with existing names: {', '.join(colliding[:10])}")
        raise AggregationError(f"Intergenic names can not be normalized without merging distinct transcripts: "
                               f"{', '.join(colliding)}")
    return normalization_map


def normalize_tx2gene(tx2gene, normalization_map):
    """
    Replace dots in every transcript name, as the aggregator would otherwise
    truncate all of them, and rename the genes of normalized intergenic regions
    so that intergenic rows keep identical TXNAME and GENEID.
    """
    normalized = tx2gene.copy()
    normalized['TXNAME'] = normalized['TXNAME'].str.replace('.', '_', regex=False)
    if normalization_map:
        normalized['GENEID'] = normalized['GENEID'].replace(normalization_map)
    return normalized


def normalize_intergenic_names(tx2gene, abundance_file, output_dir, transcript_id_header, enabled=True):
    """
    Normalize the intergenic names of the tx2gene mapping and of the abundance file.

    Parameters
    ----------
    tx2gene : pd.DataFrame
        Mapping with TXNAME and GENEID columns
    abundance_file : str
        Path to the abundance file of the library
    output_dir : str
        Directory of the current run, where the normalized abundance file is written
    transcript_id_header : str
        Name of the transcript id column of the abundance file
    enabled : bool
        If False, the inputs are returned unchanged

    Returns
    -------
    NormalizedInputs
        Normalized mapping, path to the abundance file to aggregate and the
        mapping from original to normalized names. is_temporary is True when a
        new abundance file was written and has to be removed by the caller.
    """
    if not enabled:
        return NormalizedInputs(tx2gene=tx2gene, abundance_file=abundance_file)

    logging.info("Transcript versions are ignored: verifying that intergenic names do not contain any dot")
    normalization_map = intergenic_normalization_map(tx2gene)
    normalized_tx2gene = normalize_tx2gene(tx2gene, normalization_map)

    abundance = pd.read_csv(abundance_file, sep='\t', dtype={transcript_id_header: str}, keep_default_na=False)
    if normalization_map:
        abundance[transcript_id_header] = abundance[transcript_id_header].replace(normalization_map)
    n_renamed = int(abundance[transcript_id_header].isin(normalization_map.values()).sum())
    logging.info(f"{len(normalization_map)} intergenic names contain a dot, "
                 f"{n_renamed} of them renamed in the abundance file")

    temp_abundance_file = os.path.join(output_dir, TEMP_ABUNDANCE_FILE)
    os.makedirs(output_dir, exist_ok=True)
    abundance.to_csv(temp_abundance_file, sep='\t', index=False)

    return NormalizedInputs(tx2gene=normalized_tx2gene, abundance_file=temp_abundance_file,
                            normalization_map=normalization_map, is_temporary=True)


def restore_intergenic_names(frame, normalization_map):
    """
    Rename the rows of an aggregated matrix back to the original intergenic names.

    Only names produced by the normalization are renamed: a genic id that
    happens to contain an underscore is left untouched.
    """
    if not normalization_map:
        return frame
    inverse = {normalized: original for original, normalized in normalization_map.items()}
    return frame.rename(index=inverse)
