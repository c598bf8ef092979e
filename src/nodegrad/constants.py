# Initial value of every neuron weight.
WEIGHT_INIT = 1.0
# Initial value of every neuron bias.
BIAS_INIT = 0.0

# L2 regularization strength used by the example loss.
ALPHA = 1e-4

SAMPLE_SEED = 2147483647

GRAPH_FORMAT = "svg"
GRAPH_RANKDIR = "LR"
