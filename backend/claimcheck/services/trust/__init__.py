# Trust Layer Services
#
# Turns free text into a trust verdict:
# - What claims were made (ClaimExtractor)
# - How well the evidence backs each claim (ClaimScorer)
# - How much to trust the text overall (TrustAggregator)
