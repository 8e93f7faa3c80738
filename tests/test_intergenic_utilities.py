import gzip

import pytest

from intergenic_call.intergenic_utilities import get_intergenic_ids, intergenic_tx2gene
from intergenic_call.metadata_utilities import UserMetadata

from conftest import INTERGENIC_IDS


def test_ids_from_fasta(user_metadata):
    assert get_intergenic_ids(user_metadata) == INTERGENIC_IDS


def test_ids_from_gzipped_fasta(tmp_path):
    path = tmp_path / 'ref_intergenic.fa.gz'
    with gzip.open(path, 'wt') as out:
        out.write('>KB708127.1_324_4365 some description\nACGT\n>chrI_1_50\nACGT\n')
    user = UserMetadata(species_id='6239', intergenic_file=str(path))
    assert get_intergenic_ids(user) == ['KB708127.1_324_4365', 'chrI_1_50']


def test_ids_from_list_with_header_and_duplicates(tmp_path):
    path = tmp_path / 'intergenic_ids.txt'
    path.write_text('intergenic_ids\nchrI_1_50\n\nchrI_60_90\nchrI_1_50\n')
    user = UserMetadata(species_id='6239', intergenic_file=str(path))
    assert get_intergenic_ids(user) == ['chrI_1_50', 'chrI_60_90']


def test_missing_intergenic_file(tmp_path):
    user = UserMetadata(species_id='6239', intergenic_file=str(tmp_path / 'missing.txt'))
    with pytest.raises(FileNotFoundError):
        get_intergenic_ids(user)


def test_intergenic_regions_are_their_own_gene():
    tx2gene = intergenic_tx2gene(INTERGENIC_IDS)
    assert list(tx2gene.columns) == ['TXNAME', 'GENEID']
    assert (tx2gene['TXNAME'] == tx2gene['GENEID']).all()
    assert tx2gene['TXNAME'].tolist() == INTERGENIC_IDS
