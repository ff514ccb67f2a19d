"""NetFlow version 5 packet decoding and JSON encoding."""