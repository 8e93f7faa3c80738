"""
Transcript database built from a GTF or GFF3 annotation.

The database only answers the two questions the tx2gene builder asks: which
transcripts exist (`keys`) and to which gene each of them belongs (`select`).

Functions
---------
read_annotation_as_dataframe : Reads a GTF/GFF3 file into a transcript to gene DataFrame.
create_txdb : Builds a TranscriptDatabase from the annotation of a UserMetadata.
keys : Returns the keys of a TranscriptDatabase for a key type.
select : Resolves keys of a TranscriptDatabase to another column.
"""

import logging
import pandas as pd

from intergenic_call.exceptions import MappingResolutionError

GFF_COLUMNS = ['chr', 'source', 'type', 'start', 'end', 'score', 'strand', 'phase', 'attributes']

# Feature types of a GFF3 file that describe transcripts
GFF3_TRANSCRIPT_TYPES = ('mRNA', 'transcript', 'ncRNA', 'lnc_RNA', 'lncRNA', 'miRNA', 'snRNA', 'snoRNA',
                         'rRNA', 'tRNA', 'pseudogenic_transcript', 'primary_transcript', 'scRNA', 'unconfirmed_transcript')

KEYTYPES = {'TXNAME': 'tx_name', 'GENEID': 'gene_id'}


def _is_gtf(annotation_path):
    name = annotation_path.lower()
    if name.endswith('.gz'):
        name = name[:-3]
    return name.endswith('.gtf')


def read_annotation_as_dataframe(annotation_path):
    """
    Reads a GTF or GFF3 annotation and returns one row per transcript.

    Parameters
    ----------
    annotation_path : str
        Path to the annotation. Gzipped files are accepted.

    Returns
    -------
    pd.DataFrame
        DataFrame with columns 'tx_name' and 'gene_id'. 'gene_id' is missing
        (NaN) for transcripts without gene information.
    """
    try:
        gff_df = pd.read_csv(annotation_path, sep='\t', header=None, comment='#',
                             names=GFF_COLUMNS, dtype=str, usecols=range(9))
    except FileNotFoundError:
        logging.error(f"Annotation file not found: {annotation_path}")
        raise
    except Exception as e:
        logging.error(f"Error reading annotation file {annotation_path}: {e}")
        raise

    if _is_gtf(annotation_path):
        # Every feature carrying a transcript_id defines the transcript
        tx_df = pd.DataFrame({
            'tx_name': gff_df['attributes'].str.extract(r'transcript_id "([^"]+)"', expand=False),
            'gene_id': gff_df['attributes'].str.extract(r'gene_id "([^"]+)"', expand=False)
        })
    else:
        gff_df = gff_df[gff_df['type'].isin(GFF3_TRANSCRIPT_TYPES)]
        tx_df = pd.DataFrame({
            'tx_name': gff_df['attributes'].str.extract(r'ID=([^;]+)', expand=False),
            'gene_id': gff_df['attributes'].str.extract(r'Parent=([^;,]+)', expand=False)
        })

    tx_df = tx_df.dropna(subset=['tx_name'])
    # A GTF repeats the transcript on each of its exons; keep a gene when any row has one
    tx_df = tx_df.sort_values('gene_id', na_position='last', kind='stable')
    tx_df = tx_df.drop_duplicates(subset=['tx_name', 'gene_id'])

    conflicting = tx_df.dropna(subset=['gene_id']).duplicated(subset=['tx_name'], keep=False)
    if conflicting.any():
        names = sorted(tx_df.dropna(subset=['gene_id']).loc[conflicting, 'tx_name'].unique())
        raise MappingResolutionError(f"Transcripts assigned to more than one gene in {annotation_path}: "
                                     f"{', '.join(names[:10])}")

    tx_df = tx_df.drop_duplicates(subset=['tx_name'], keep='first')
    logging.info(f"Read {len(tx_df)} transcripts from {annotation_path}")
    return tx_df.sort_index().reset_index(drop=True)


class TranscriptDatabase:
    """
    In-memory transcript database of one annotation.

    Parameters
    ----------
    transcripts : pd.DataFrame
        DataFrame with 'tx_name' and 'gene_id' columns
    taxonomy_id : int, optional
        NCBI taxonomy identifier of the annotated species
    """

    def __init__(self, transcripts, taxonomy_id=None):
        self.transcripts = transcripts.reset_index(drop=True)
        self.taxonomy_id = taxonomy_id

    def __len__(self):
        return len(self.transcripts)

    def keys(self, keytype='TXNAME'):
        if keytype not in KEYTYPES:
            raise ValueError(f"Invalid keytype '{keytype}'. Options are: {', '.join(KEYTYPES)}")
        return self.transcripts[KEYTYPES[keytype]].dropna().drop_duplicates().tolist()

    def select(self, keys, columns='GENEID', keytype='TXNAME'):
        """
        Resolve keys to the values of another column.

        Raises
        ------
        MappingResolutionError
            If any of the keys is unknown or has no value for `columns`.
        """
        for k in (columns, keytype):
            if k not in KEYTYPES:
                raise ValueError(f"Invalid keytype '{k}'. Options are: {', '.join(KEYTYPES)}")
        lookup = self.transcripts.drop_duplicates(subset=[KEYTYPES[keytype]]).set_index(KEYTYPES[keytype])
        resolved = lookup[KEYTYPES[columns]].reindex(list(keys))
        unresolved = resolved[resolved.isna()].index.tolist()
        if unresolved:
            raise MappingResolutionError(f"{len(unresolved)} {keytype} keys could not be resolved to {columns}: "
                                         f"{', '.join(map(str, unresolved[:10]))}")
        return pd.DataFrame({keytype: resolved.index.astype(str), columns: resolved.values})


def keys(txdb, keytype='TXNAME'):
    return txdb.keys(keytype)


def select(txdb, keys, columns='GENEID', keytype='TXNAME'):
    return txdb.select(keys, columns=columns, keytype=keytype)


def create_txdb(user_metadata):
    """
    Create the transcript database of the annotation described by user_metadata.

    Parameters
    ----------
    user_metadata : UserMetadata
        Must define annotation_file and species_id

    Returns
    -------
    TranscriptDatabase
    """
    transcripts = read_annotation_as_dataframe(user_metadata.annotation_file)
    taxonomy_id = int(user_metadata.species_id) if str(user_metadata.species_id).isdigit() else None
    return TranscriptDatabase(transcripts, taxonomy_id=taxonomy_id)
