from config import mask_secret


def test_mask_secret():
    assert mask_secret("") == "NOT SET"
    assert mask_secret("sk_test_1234567890abcdef", 15) == "sk_test_1234567..."
