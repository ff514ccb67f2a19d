"""Decoding of layer two, three and four headers of sampled packets."""