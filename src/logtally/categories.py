"""
categories.py

Names of the three result categories and the field each one is keyed by.

The category names double as directory names under the output root, so they
are part of the on-disk contract between the batch job and any viewer.
"""

STATUS_COUNTS = "status_counts"
TOP_URLS = "top_urls"
TOP_IPS = "top_ips"

CATEGORIES = (STATUS_COUNTS, TOP_URLS, TOP_IPS)

# record column used as the grouping key for each category
CATEGORY_KEYS = {
    STATUS_COUNTS: "statusCode",
    TOP_URLS: "url",
    TOP_IPS: "ipAddress",
}

# Written last into each category directory. Holds the shard file names, one
# per line, so readers that cannot list the directory can still find them.
SUCCESS_MARKER = "_SUCCESS"
