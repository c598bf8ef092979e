from nodegrad.loss import max_margin_loss
from nodegrad.nn import MLP
from nodegrad.node import NodeArena

# ? small two-feature dataset, labels +1 / -1
X = [
    [2.0, 3.0],
    [3.0, -1.0],
    [0.5, 1.0],
    [-1.0, -1.5],
    [-2.0, 0.5],
    [-0.5, -2.0],
]
Y = [1, 1, 1, -1, -1, -1]


def diamond_example() -> None:
    arena = NodeArena()

    # ? leaves a, b, c, d
    a = arena.leaf(1.0, label="a")
    b = arena.leaf(2.0, label="b")
    c = arena.leaf(3.0, label="c")
    d = arena.leaf(4.0, label="d")

    # (a + b) + (c * d)
    e = a + b
    e.label = "e"
    f = c * d
    f.label = "f"
    g = e + f
    g.label = "g"

    g.backward()

    print(f"g = {g.data}")
    for node in (a, b, c, d):
        print(f"  d(g)/d({node.label}) = {node.grad}")


def mlp_loss_example() -> None:
    arena = NodeArena()
    model = MLP(2, [16, 16, 1], arena=arena)
    print(model)
    print(f"number of parameters: {len(model.parameters())}")

    # ? everything past this mark is the transient forward/backward graph
    mark = len(arena)
    total_loss, accuracy = max_margin_loss(model, X, Y)
    model.zero_grad()
    total_loss.backward()

    print(f"loss = {total_loss.data:.6f}, accuracy = {accuracy:.2%}")
    print(f"graph size: {len(arena)} nodes")
    first_layer = model.layers[0].neurons[0]
    print(f"first neuron weight grads: {[w.grad for w in first_layer.w]}")
    print(f"first neuron bias grad: {first_layer.b.grad}")

    arena.truncate(mark)
    print(f"graph size after release: {len(arena)} nodes")


def main() -> None:
    diamond_example()
    print("-" * 40)
    mlp_loss_example()


if __name__ == "__main__":
    main()
