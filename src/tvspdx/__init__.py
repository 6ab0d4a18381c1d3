"""Parser for the tag-value format of SPDX 2.3 documents."""
