"""sFlow version 5 datagram, flow sample and counter sample decoding."""